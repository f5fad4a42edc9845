from typing import Tuple

import cv2
import numpy as np


def as_image(image: np.ndarray) -> np.ndarray:
    """
    Приведение к 8-битному изображению (H, W) или (H, W, 3).

    Четвертый канал (альфа) отбрасывается. Принимаются только целочисленные
    изображения со значениями в [0, 255]: вещественное изображение (например,
    в диапазоне [0, 1]) - ValueError, а не молчаливое округление.
    """
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 4:
        image = image[:, :, :3]
    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    if not (image.ndim == 2 or (image.ndim == 3 and image.shape[2] == 3)):
        raise ValueError(f"Ожидается изображение (H, W) или (H, W, 3), получена форма {image.shape}")

    if image.dtype == np.uint8:
        return image
    if not np.issubdtype(image.dtype, np.integer):
        raise ValueError(f"Ожидается 8-битное целочисленное изображение, получен тип {image.dtype}")
    if image.size and (image.min() < 0 or image.max() > 255):
        raise ValueError(
            f"Значения изображения вне диапазона [0, 255]: [{image.min()}, {image.max()}]"
        )
    return image.astype(np.uint8)


def check_bounds(a: np.ndarray, b: np.ndarray):
    """Изображения сравниваются только при совпадении размеров"""
    if a.shape[:2] != b.shape[:2]:
        raise ValueError(
            f"Размеры изображений не совпадают: {a.shape[1]}x{a.shape[0]} и {b.shape[1]}x{b.shape[0]}"
        )


def to_gray(image: np.ndarray) -> np.ndarray:
    """Яркость Y = 0.299R + 0.587G + 0.114B с округлением до 8 бит"""
    image = as_image(image)
    if image.ndim == 2:
        return image
    if image.size == 0:
        return np.zeros(image.shape[:2], dtype=np.uint8)
    return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)


def split_channels(image: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Три серых изображения R, G, B; серое изображение дает одну плоскость трижды"""
    image = as_image(image)
    if image.ndim == 2:
        return image, image, image
    return (
        np.ascontiguousarray(image[:, :, 0]),
        np.ascontiguousarray(image[:, :, 1]),
        np.ascontiguousarray(image[:, :, 2]),
    )
