from pathlib import Path
import json
from typing import Optional
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import seaborn as sns

from .config import PROJECT_ROOT

# Директория с графиками по умолчанию
FIGURES_DIR = PROJECT_ROOT / "results" / "figures"


def load_json(path: Path) -> dict:
    """Загрузка JSON-файла"""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_figure(filename: str, figures_dir: Optional[Path] = None) -> Path:
    """Сохранение текущей фигуры"""
    target_dir = Path(figures_dir) if figures_dir is not None else FIGURES_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / filename
    plt.tight_layout()
    plt.savefig(path, dpi=300)
    plt.close()
    return path


def setup_visual_style():
    """Единый стиль визуализаций"""
    sns.set_theme(
        style="whitegrid",
        context="talk",
        palette="Set2"
    )
