from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import seaborn as sns

from ..comparison.report import AgreementTable
from ..utils import save_figure, setup_visual_style


def plot_agreement_heatmap(table: AgreementTable, filename: str, figures_dir: Optional[Path] = None) -> Path:
    """Тепловая карта таблицы согласованности метрик"""
    setup_visual_style()

    n_rows, n_cols = table.data.shape
    plt.figure(figsize=(max(6, 1.8 * n_cols), max(4, 0.8 * n_rows + 2)))
    sns.heatmap(
        table.data.astype(float),
        annot=True,
        fmt=".3f",
        cmap="viridis",
        cbar_kws={"label": "Значение"}
    )
    plt.title(table.title)
    plt.xlabel("Статистики согласованности")
    plt.ylabel(table.row_label)
    return save_figure(filename, figures_dir)
