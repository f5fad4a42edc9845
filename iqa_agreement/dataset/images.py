from pathlib import Path
from typing import Union

import cv2
import numpy as np


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Чтение изображения в RGB (H, W, 3) uint8"""
    path = Path(path)
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Не удалось прочитать изображение: {path}")
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
