"""
Присвоение рангов числовой последовательности.

Поддерживаемые способы обработки связей (на примере [1, 2, 2, 3]):
- standard_competition : 1, 2, 2, 4
- modified_competition : 1, 3, 3, 4
- dense                : 1, 2, 2, 3
- ordinal              : 1, 2, 3, 4 (связи по исходному порядку)
- fractional           : 1, 2.5, 2.5, 4
"""

from enum import Enum
from typing import Sequence, Union

import numpy as np

from .descriptive import as_vector


class RankingMethod(str, Enum):
    STANDARD_COMPETITION = "standard_competition"
    MODIFIED_COMPETITION = "modified_competition"
    DENSE = "dense"
    ORDINAL = "ordinal"
    FRACTIONAL = "fractional"

    @classmethod
    def parse(cls, method: Union["RankingMethod", str]) -> "RankingMethod":
        """Разбор значения из конфигурации ('fractional', 'standard-competition', ...)"""
        if isinstance(method, cls):
            return method
        if isinstance(method, str):
            key = method.strip().lower().replace("-", "_")
            for member in cls:
                if member.value == key:
                    return member

        available = ", ".join(m.value for m in cls)
        raise ValueError(
            f"Способ ранжирования '{method}' не найден. "
            f"Доступные способы: {available}"
        )


def rank(values: Sequence[float], method: Union[RankingMethod, str] = RankingMethod.FRACTIONAL) -> np.ndarray:
    """
    Ранги элементов последовательности (начиная с 1).

    Значения упорядочиваются устойчивой сортировкой по возрастанию, поэтому
    равные значения сохраняют исходный взаимный порядок. Результат имеет ту же
    длину и то же выравнивание по индексам, что и вход.
    """
    method = RankingMethod.parse(method)
    array = as_vector(values)
    n = array.size

    ranks = np.empty(n, dtype=np.float64)
    if n == 0:
        return ranks

    order = np.argsort(array, kind="stable")
    sorted_values = array[order]

    # границы групп равных значений в отсортированном порядке
    group_start = np.ones(n, dtype=bool)
    group_start[1:] = sorted_values[1:] != sorted_values[:-1]
    group_id = np.cumsum(group_start) - 1
    starts = np.flatnonzero(group_start)
    ends = np.append(starts[1:], n)

    if method is RankingMethod.STANDARD_COMPETITION:
        sorted_ranks = starts[group_id] + 1.0
    elif method is RankingMethod.MODIFIED_COMPETITION:
        sorted_ranks = ends[group_id].astype(np.float64)
    elif method is RankingMethod.DENSE:
        sorted_ranks = group_id + 1.0
    elif method is RankingMethod.ORDINAL:
        sorted_ranks = np.arange(1, n + 1, dtype=np.float64)
    elif method is RankingMethod.FRACTIONAL:
        # среднее порядковых рангов start+1 .. end
        sorted_ranks = ((starts + 1 + ends) / 2.0)[group_id]
    else:
        raise ValueError(f"Способ ранжирования не поддерживается: {method}")

    ranks[order] = sorted_ranks
    return ranks
