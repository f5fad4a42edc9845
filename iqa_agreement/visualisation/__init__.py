"""
Модуль визуализации таблиц согласованности метрик
"""

from .vis_agreement import (
    plot_agreement_heatmap
)

__all__ = [
    "plot_agreement_heatmap"
]
