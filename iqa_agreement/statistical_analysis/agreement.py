"""
Статистики согласованности двух рядов оценок.

Корреляции (PLCC, SROCC, KROCC) отвечают на вопрос о согласии порядка или
линейной зависимости, RMSE и его нормированные варианты - о расхождении
стандартизированных кривых. Все функции требуют рядов одинаковой длины,
выровненных по индексам; вырожденные данные дают NaN.
"""

from enum import Enum
from typing import Callable, Dict, Sequence, Tuple, Union

import numpy as np

from .descriptive import as_vector, mean, mean_sd, minimum, maximum, quantile
from .ranking import RankingMethod, rank


def _pair(a: Sequence[float], b: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    a, b = as_vector(a), as_vector(b)
    if a.size != b.size:
        raise ValueError(f"Ряды должны иметь одинаковую длину: {a.size} != {b.size}")
    return a, b


def _is_constant(values: np.ndarray) -> bool:
    """Постоянный ряд (нулевая дисперсия) определяется по размаху, а не по центрированным значениям"""
    return bool(values.size > 0 and np.ptp(values) == 0)


def _ratio(numerator: float, denominator: float) -> float:
    """Деление, где нулевой или неопределенный делитель дает NaN"""
    if denominator == 0 or np.isnan(denominator) or np.isnan(numerator):
        return float("nan")
    return float(numerator / denominator)


def plcc(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Коэффициент линейной корреляции Пирсона.

    sum(ca * cb) / (sqrt(sum(ca^2)) * sqrt(sum(cb^2))), где ca, cb - центрированные ряды.
    """
    a, b = _pair(a, b)
    if a.size == 0 or _is_constant(a) or _is_constant(b):
        return float("nan")

    ca, cb = a - mean(a), b - mean(b)
    return _ratio(np.sum(ca * cb), np.sqrt(np.sum(ca * ca)) * np.sqrt(np.sum(cb * cb)))


def srocc(a: Sequence[float], b: Sequence[float]) -> float:
    """Ранговая корреляция Спирмена: PLCC дробных рангов"""
    a, b = _pair(a, b)
    return plcc(rank(a, RankingMethod.FRACTIONAL), rank(b, RankingMethod.FRACTIONAL))


def krocc(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Ранговая корреляция Кендалла, вариант tau-b.

    Каждая неупорядоченная пара индексов относится к согласованным,
    несогласованным, связанным только в a или только в b (пары, связанные
    в обоих рядах, не учитываются):

        tau_b = (C - D) / sqrt((C + D + Ta) * (C + D + Tb))
    """
    a, b = _pair(a, b)
    ra, rb = rank(a, RankingMethod.FRACTIONAL), rank(b, RankingMethod.FRACTIONAL)

    i, j = np.triu_indices(ra.size, k=1)
    sign_a = np.sign(ra[j] - ra[i])
    sign_b = np.sign(rb[j] - rb[i])

    untied = (sign_a != 0) & (sign_b != 0)
    concordant = int(np.count_nonzero(untied & (sign_a == sign_b)))
    discordant = int(np.count_nonzero(untied & (sign_a != sign_b)))
    ties_a = int(np.count_nonzero((sign_a == 0) & (sign_b != 0)))
    ties_b = int(np.count_nonzero((sign_a != 0) & (sign_b == 0)))

    denominator = np.sqrt(float(concordant + discordant + ties_a) * float(concordant + discordant + ties_b))
    return _ratio(float(concordant - discordant), denominator)


def rmse(a: Sequence[float], b: Sequence[float]) -> float:
    """
    RMSE между рядами, каждый из которых стандартизирован своим средним
    и своим выборочным стандартным отклонением.
    """
    a, b = _pair(a, b)
    if a.size == 0 or _is_constant(a) or _is_constant(b):
        return float("nan")

    avg_a, sd_a = mean_sd(a)
    avg_b, sd_b = mean_sd(b)
    if not (sd_a > 0 and sd_b > 0):
        return float("nan")

    error = (b - avg_b) / sd_b - (a - avg_a) / sd_a
    return float(np.sqrt(np.sum(error * error) / a.size))


def nrmse_sd(a: Sequence[float], b: Sequence[float]) -> float:
    """RMSE, деленный на стандартное отклонение a"""
    return _ratio(rmse(a, b), mean_sd(a)[1])


def nrmse_mean(a: Sequence[float], b: Sequence[float]) -> float:
    """RMSE, деленный на среднее a"""
    return _ratio(rmse(a, b), mean(a))


def nrmse_maxmin(a: Sequence[float], b: Sequence[float]) -> float:
    """RMSE, деленный на размах a"""
    return _ratio(rmse(a, b), maximum(a) - minimum(a))


def nrmse_iq(a: Sequence[float], b: Sequence[float]) -> float:
    """RMSE, деленный на межквартильный размах a"""
    return _ratio(rmse(a, b), quantile(a, 0.75) - quantile(a, 0.25))


class AgreementStatistic(str, Enum):
    SROCC = "SROCC"
    KROCC = "KROCC"
    PLCC = "PLCC"
    RMSE = "RMSE"
    NRMSE_SD = "NRMSE_SD"
    NRMSE_MEAN = "NRMSE_MEAN"
    NRMSE_MAXMIN = "NRMSE_MAXMIN"
    NRMSE_IQ = "NRMSE_IQ"

    @classmethod
    def parse(cls, statistic: Union["AgreementStatistic", str]) -> "AgreementStatistic":
        if isinstance(statistic, cls):
            return statistic
        if isinstance(statistic, str):
            key = statistic.strip().upper()
            for member in cls:
                if member.value == key:
                    return member

        available = ", ".join(m.value for m in cls)
        raise ValueError(
            f"Статистика согласованности '{statistic}' не найдена. "
            f"Доступные статистики: {available}"
        )


_STATISTICS: Dict[AgreementStatistic, Callable[[Sequence[float], Sequence[float]], float]] = {
    AgreementStatistic.SROCC: srocc,
    AgreementStatistic.KROCC: krocc,
    AgreementStatistic.PLCC: plcc,
    AgreementStatistic.RMSE: rmse,
    AgreementStatistic.NRMSE_SD: nrmse_sd,
    AgreementStatistic.NRMSE_MEAN: nrmse_mean,
    AgreementStatistic.NRMSE_MAXMIN: nrmse_maxmin,
    AgreementStatistic.NRMSE_IQ: nrmse_iq,
}

_missing = set(AgreementStatistic) - set(_STATISTICS)
if _missing:
    raise RuntimeError(f"Нет реализации для статистик: {sorted(m.value for m in _missing)}")


def compute_agreement(statistic: Union[AgreementStatistic, str],
                      a: Sequence[float], b: Sequence[float]) -> float:
    """Вычисляет выбранную статистику согласованности для пары рядов"""
    return _STATISTICS[AgreementStatistic.parse(statistic)](a, b)
