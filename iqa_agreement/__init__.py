"""
Пакет оценки согласованности метрик качества изображений с субъективными оценками.

Этапы:
- dataset              : загрузка датасета MDID и изображений
- fidelity             : метрики точности изображений (MSE, PSNR, SSIM, блочная разность)
- statistical_analysis : ранжирование и статистики согласованности
- comparison           : сравнение метрик и отчет
- visualisation        : визуализация таблиц согласованности
"""

# Утилиты
from .utils import (
    setup_logging,
    get_logger,
    load_config,
)

# Статистический анализ
from .statistical_analysis import (
    RankingMethod,
    rank,
    AgreementStatistic,
    compute_agreement,
    plcc,
    srocc,
    krocc,
    rmse,
)

# Метрики изображений
from .fidelity import (
    ImageMetric,
    compute_image_metrics,
)

# Данные
from .dataset import (
    Dataset,
    load_mdid,
    load_image,
)

# Сравнение и визуализация
from .comparison import MetricAgreementAnalyzer, AgreementTable
from .visualisation import plot_agreement_heatmap

# Публичный API
__all__ = [
    # утилиты
    "setup_logging",
    "get_logger",
    "load_config",

    # стат анализ
    "RankingMethod",
    "rank",
    "AgreementStatistic",
    "compute_agreement",
    "plcc",
    "srocc",
    "krocc",
    "rmse",

    # метрики изображений
    "ImageMetric",
    "compute_image_metrics",

    # данные
    "Dataset",
    "load_mdid",
    "load_image",

    # сравнение
    "MetricAgreementAnalyzer",
    "AgreementTable",

    # визуализация
    "plot_agreement_heatmap",
]
