"""
Пакет утилит: логирование, конфигурация, визуальный стиль
"""

from .logger import (
    EvaluationLogger,
    setup_logging,
    get_logger,
    log_metric,
    CustomFormatter,
    MetricsFilter
)

from .config import (
    DEFAULT_CONFIG,
    load_config,
    deep_update,
    resolve_path
)

from .visualisation_tools import (
    load_json,
    save_figure,
    setup_visual_style
)

__all__ = [
    # logging
    'EvaluationLogger',
    'setup_logging',
    'get_logger',
    'log_metric',
    'CustomFormatter',
    'MetricsFilter',

    # config
    'DEFAULT_CONFIG',
    'load_config',
    'deep_update',
    'resolve_path',

    # visualisation
    'load_json',
    'save_figure',
    'setup_visual_style'
]
