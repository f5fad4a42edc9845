"""
Метрики точности воспроизведения изображения относительно эталона.

Все функции принимают пару изображений одинакового размера: (H, W) серые
или (H, W, 3) RGB, 8 бит на канал. Несовпадение размеров - ValueError,
изображение нулевой площади - NaN.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Set, Tuple, Union

import cv2
import numpy as np
from skimage.metrics import structural_similarity

from .color import as_image, check_bounds, split_channels, to_gray
from ..utils.logger import get_logger

logger = get_logger(__name__)

PEAK_SQUARED = 65025.0  # 255 * 255

# Константы SSIM для динамического диапазона L = 255
SSIM_L = 255.0
SSIM_K1 = 0.01
SSIM_K2 = 0.03
SSIM_C1 = (SSIM_K1 * SSIM_L) ** 2
SSIM_C2 = (SSIM_K2 * SSIM_L) ** 2

Rect = Tuple[int, int, int, int]


def mse_gray(a: np.ndarray, b: np.ndarray) -> float:
    """Среднеквадратичная ошибка двух серых изображений"""
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    if a.size == 0:
        return float("nan")

    error = b.astype(np.float64) - a.astype(np.float64)
    return float(np.mean(error * error))


def mse(a: np.ndarray, b: np.ndarray) -> float:
    """MSE по яркости: оба изображения сначала переводятся в серые"""
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    return mse_gray(to_gray(a), to_gray(b))


def mse_rgb(a: np.ndarray, b: np.ndarray) -> float:
    """
    Среднее MSE по каналам R, G, B.

    В общем случае не равно MSE по яркости: ошибки каналов не сводятся
    линейно к ошибке яркости.
    """
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    errors = [mse_gray(ca, cb) for ca, cb in zip(split_channels(a), split_channels(b))]
    return float(sum(errors) / 3.0)


def psnr_from_mse(value: float) -> float:
    """
    PSNR = -10 * log10(MSE / 255^2).

    Для MSE = 0 (одинаковые изображения) возвращается +inf.
    """
    if np.isnan(value):
        return float("nan")
    if value == 0:
        return float("inf")
    return float(-10.0 * np.log10(value / PEAK_SQUARED))


def psnr(a: np.ndarray, b: np.ndarray) -> float:
    return psnr_from_mse(mse(a, b))


def psnr_rgb(a: np.ndarray, b: np.ndarray) -> float:
    return psnr_from_mse(mse_rgb(a, b))


def ssim_global(a: np.ndarray, b: np.ndarray) -> float:
    """
    Глобальное приближение SSIM.

    Одно окно на все изображение: средние, выборочные дисперсии и ковариация
    серых изображений подставляются в формулу SSIM

        ((2 ma mb + C1)(2 cov + C2)) / ((ma^2 + mb^2 + C1)(va + vb + C2))

    Это грубое приближение, а не SSIM со скользящим окном из литературы
    (см. ssim_windowed).
    """
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)

    ga = to_gray(a).astype(np.float64).ravel()
    gb = to_gray(b).astype(np.float64).ravel()
    n = ga.size
    if n < 2:
        return float("nan")

    mean_a, mean_b = ga.mean(), gb.mean()
    ca, cb = ga - mean_a, gb - mean_b
    var_a = np.sum(ca * ca) / (n - 1)
    var_b = np.sum(cb * cb) / (n - 1)
    cov_ab = np.sum(ca * cb) / (n - 1)

    numerator = (2.0 * mean_a * mean_b + SSIM_C1) * (2.0 * cov_ab + SSIM_C2)
    denominator = (mean_a ** 2 + mean_b ** 2 + SSIM_C1) * (var_a + var_b + SSIM_C2)
    return float(numerator / denominator)


def ssim_windowed(a: np.ndarray, b: np.ndarray, win_size: int = 7) -> float:
    """SSIM со скользящим окном (scikit-image) по серым изображениям"""
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)

    ga, gb = to_gray(a), to_gray(b)
    if min(ga.shape) < win_size:
        logger.debug(f"Изображение {ga.shape} меньше окна SSIM {win_size}")
        return float("nan")

    return float(structural_similarity(ga, gb, win_size=win_size, data_range=SSIM_L))


def _accumulate_blocks(sat: np.ndarray, rect: Rect, image_area: float, visited: Set[Rect]) -> float:
    """
    Вклад прямоугольника и всех его подпрямоугольников.

    Прямоугольник (x0, y0, x1, y1) полуоткрытый. Уже посещенный в текущем
    вызове прямоугольник (и его поддерево) пропускается.
    """
    if rect in visited:
        return 0.0
    visited.add(rect)

    x0, y0, x1, y1 = rect
    width, height = x1 - x0, y1 - y0
    area = width * height

    block_sum = sat[y1, x1] - sat[y0, x1] - sat[y1, x0] + sat[y0, x0]
    mean_diff = block_sum / area
    result = mean_diff * mean_diff * area / image_area

    if width == 1 and height == 1:
        return result

    half_w, half_h = (width + 1) // 2, (height + 1) // 2
    quadrants = (
        (x0, y0, x0 + half_w, y0 + half_h),
        (x1 - half_w, y0, x1, y0 + half_h),
        (x0, y1 - half_h, x0 + half_w, y1),
        (x1 - half_w, y1 - half_h, x1, y1),
    )
    for quadrant in quadrants:
        result += _accumulate_blocks(sat, quadrant, image_area, visited)
    return result


def block_difference_gray(a: np.ndarray, b: np.ndarray) -> float:
    """
    Рекурсивная блочная разность двух серых плоскостей.

    Прямоугольник изображения рекурсивно делится на четыре угловых
    подпрямоугольника размером ceil(w/2) x ceil(h/2) (при нечетных размерах
    они перекрываются) вплоть до отдельных пикселей. Каждый прямоугольник
    добавляет (meanA - meanB)^2 * area / area(image). Множество посещенных
    прямоугольников создается заново на каждый вызов, поэтому совпадающие
    подпрямоугольники учитываются один раз.
    """
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    if a.ndim != 2 or b.ndim != 2:
        raise ValueError("Блочная разность считается по одной плоскости (H, W)")

    height, width = a.shape
    if width == 0 or height == 0:
        return float("nan")

    diff = a.astype(np.float64) - b.astype(np.float64)
    sat = cv2.integral(diff, sdepth=cv2.CV_64F)

    visited: Set[Rect] = set()
    return float(_accumulate_blocks(sat, (0, 0, width, height), float(width * height), visited))


def block_difference(a: np.ndarray, b: np.ndarray) -> float:
    """Среднее блочных разностей по каналам R, G, B"""
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    sums = [block_difference_gray(ca, cb) for ca, cb in zip(split_channels(a), split_channels(b))]
    return float(sum(sums) / 3.0)


def block_difference_luma(a: np.ndarray, b: np.ndarray) -> float:
    """Блочная разность по яркости"""
    a, b = as_image(a), as_image(b)
    check_bounds(a, b)
    return block_difference_gray(to_gray(a), to_gray(b))


class ImageMetric(str, Enum):
    MSE_GRAY = "MSEg"
    PSNR_GRAY = "PSNRg"
    MSE = "MSE"
    PSNR = "PSNR"
    SSIM = "SSIM"
    SSIM_WINDOWED = "SSIMw"
    BLOCK_DIFFERENCE_GRAY = "RBDg"
    BLOCK_DIFFERENCE = "RBD"

    @classmethod
    def parse(cls, metric: Union["ImageMetric", str]) -> "ImageMetric":
        if isinstance(metric, cls):
            return metric
        for member in cls:
            if member.value == metric:
                return member

        available = ", ".join(m.value for m in cls)
        raise ValueError(
            f"Метрика изображения '{metric}' не найдена. "
            f"Доступные метрики: {available}"
        )


_METRICS: Dict[ImageMetric, Callable[[np.ndarray, np.ndarray], float]] = {
    ImageMetric.MSE_GRAY: mse,
    ImageMetric.PSNR_GRAY: psnr,
    ImageMetric.MSE: mse_rgb,
    ImageMetric.PSNR: psnr_rgb,
    ImageMetric.SSIM: ssim_global,
    ImageMetric.SSIM_WINDOWED: ssim_windowed,
    ImageMetric.BLOCK_DIFFERENCE_GRAY: block_difference_luma,
    ImageMetric.BLOCK_DIFFERENCE: block_difference,
}

_missing = set(ImageMetric) - set(_METRICS)
if _missing:
    raise RuntimeError(f"Нет реализации для метрик: {sorted(m.value for m in _missing)}")


def compute_image_metric(metric: Union[ImageMetric, str], reference: np.ndarray, distorted: np.ndarray) -> float:
    return _METRICS[ImageMetric.parse(metric)](reference, distorted)


def compute_image_metrics(reference: np.ndarray, distorted: np.ndarray,
                          metrics: Optional[Iterable[Union[ImageMetric, str]]] = None) -> Dict[str, float]:
    """
    Словарь метрик {имя: значение} для пары эталон / искаженное изображение.

    Без списка метрик считаются все доступные.
    """
    reference, distorted = as_image(reference), as_image(distorted)
    check_bounds(reference, distorted)

    selected = [ImageMetric.parse(m) for m in metrics] if metrics is not None else list(ImageMetric)

    values: Dict[str, float] = {}
    for metric in selected:
        values[metric.value] = _METRICS[metric](reference, distorted)
    return values
