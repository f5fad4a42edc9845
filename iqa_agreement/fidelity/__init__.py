"""
Метрики точности изображений (full-reference).

Включает:
- Преобразование в оттенки серого и разложение по каналам
- MSE / PSNR по яркости и по каналам RGB
- Глобальное приближение SSIM и SSIM со скользящим окном
- Рекурсивную блочную разность
"""

from .color import as_image, check_bounds, to_gray, split_channels
from .metrics import (
    ImageMetric,
    compute_image_metric,
    compute_image_metrics,
    mse_gray,
    mse,
    mse_rgb,
    psnr_from_mse,
    psnr,
    psnr_rgb,
    ssim_global,
    ssim_windowed,
    block_difference_gray,
    block_difference,
    block_difference_luma,
)

__all__ = [
    # цвет
    'as_image',
    'check_bounds',
    'to_gray',
    'split_channels',

    # метрики
    'ImageMetric',
    'compute_image_metric',
    'compute_image_metrics',
    'mse_gray',
    'mse',
    'mse_rgb',
    'psnr_from_mse',
    'psnr',
    'psnr_rgb',
    'ssim_global',
    'ssim_windowed',
    'block_difference_gray',
    'block_difference',
    'block_difference_luma',
]
