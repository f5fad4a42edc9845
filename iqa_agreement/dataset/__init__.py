"""
Модуль загрузки данных: структура датасета MDID и чтение изображений
"""

from .mdid import (
    Distortion,
    Reference,
    Dataset,
    MDIDLoader,
    load_mdid,
)

from .images import load_image

__all__ = [
    'Distortion',
    'Reference',
    'Dataset',
    'MDIDLoader',
    'load_mdid',
    'load_image',
]
