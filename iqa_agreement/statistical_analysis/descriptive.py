"""
Дескриптивная статистика числовых последовательностей.

Пустая последовательность не является ошибкой: среднее, минимум, максимум
и квантиль возвращают NaN, стандартное отклонение - NaN при n <= 1.
"""

from typing import Dict, Sequence, Tuple

import numpy as np


def as_vector(values: Sequence[float]) -> np.ndarray:
    """Приведение входа к одномерному массиву float64"""
    array = np.asarray(values, dtype=np.float64)
    if array.ndim != 1:
        raise ValueError(f"Ожидается одномерная последовательность, получена форма {array.shape}")
    return array


def total(values: Sequence[float]) -> float:
    return float(np.sum(as_vector(values)))


def mean(values: Sequence[float]) -> float:
    """Среднее арифметическое"""
    array = as_vector(values)
    if array.size == 0:
        return float("nan")
    return float(np.sum(array) / array.size)


def mean_sd(values: Sequence[float]) -> Tuple[float, float]:
    """
    Среднее и выборочное стандартное отклонение (с поправкой Бесселя) за один проход.
    """
    array = as_vector(values)
    avg = mean(array)
    if array.size <= 1:
        return avg, float("nan")

    centered = array - avg
    sd = np.sqrt(np.sum(centered * centered) / (array.size - 1))
    return avg, float(sd)


def sample_sd(values: Sequence[float]) -> float:
    """Выборочное стандартное отклонение, делитель n - 1"""
    return mean_sd(values)[1]


def minimum(values: Sequence[float]) -> float:
    array = as_vector(values)
    if array.size == 0:
        return float("nan")
    return float(np.min(array))


def maximum(values: Sequence[float]) -> float:
    array = as_vector(values)
    if array.size == 0:
        return float("nan")
    return float(np.max(array))


def quantile(values: Sequence[float], q: float) -> float:
    """
    Квантиль уровня q с линейной интерполяцией.

    Индекс интерполяции q * (n - 1); между соседними порядковыми
    статистиками значение интерполируется линейно. Вход не изменяется:
    неотсортированная последовательность сортируется в копии.
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"Уровень квантиля должен лежать в [0, 1], получено {q}")

    array = as_vector(values)
    if array.size == 0:
        return float("nan")

    if not np.all(array[:-1] <= array[1:]):
        array = np.sort(array)

    position = q * (array.size - 1)
    index = int(position)
    fraction = position - index

    if index == array.size - 1:
        return float(array[index])

    return float((1.0 - fraction) * array[index] + fraction * array[index + 1])


def describe(values: Sequence[float]) -> Dict[str, float]:
    """Сводка по последовательности для логов и отчетов"""
    array = as_vector(values)
    avg, sd = mean_sd(array)
    return {
        "n": int(array.size),
        "mean": avg,
        "sd": sd,
        "min": minimum(array),
        "q25": quantile(array, 0.25),
        "median": quantile(array, 0.5),
        "q75": quantile(array, 0.75),
        "max": maximum(array),
    }
