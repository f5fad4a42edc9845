"""
Модуль статистического анализа оценок качества.

Содержит:
1. Дескриптивную статистику рядов
2. Ранжирование с разными способами обработки связей
3. Статистики согласованности (PLCC, SROCC, KROCC, RMSE и NRMSE)
"""

from .descriptive import (
    total,
    mean,
    mean_sd,
    sample_sd,
    minimum,
    maximum,
    quantile,
    describe,
)

from .ranking import (
    RankingMethod,
    rank,
)

from .agreement import (
    AgreementStatistic,
    compute_agreement,
    plcc,
    srocc,
    krocc,
    rmse,
    nrmse_sd,
    nrmse_mean,
    nrmse_maxmin,
    nrmse_iq,
)

__all__ = [
    # descriptive statistics
    "total",
    "mean",
    "mean_sd",
    "sample_sd",
    "minimum",
    "maximum",
    "quantile",
    "describe",

    # ranking
    "RankingMethod",
    "rank",

    # agreement
    "AgreementStatistic",
    "compute_agreement",
    "plcc",
    "srocc",
    "krocc",
    "rmse",
    "nrmse_sd",
    "nrmse_mean",
    "nrmse_maxmin",
    "nrmse_iq",
]
