import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'project': {
        'name': 'mdid_metric_agreement',
    },
    'data': {
        'dataset_dir': 'dataset/MDID',
        'results_dir': 'results',
        'figures_dir': 'results/figures',
        'limit_references': None,
        'limit_distortions': None,
    },
    'comparison': {
        'opinion_score': 'mos',
        'evaluators': ['SROCC', 'KROCC', 'PLCC', 'RMSE'],
        'provided_metrics': ['PSNR', 'SSIM', 'VIF', 'IWSSIM', 'FSIMc', 'GMSD'],
        'computed_metrics': ['PSNRg', 'PSNR', 'SSIM'],
        'cross_metrics': ['PSNR', 'SSIM'],
        'absolute': True,
        'plots': True,
    },
}


def deep_update(original: Dict, update: Dict) -> Dict:
    """Рекурсивно обновляет словарь конфигурации"""
    for key, value in update.items():
        if isinstance(value, dict) and key in original and isinstance(original[key], dict):
            original[key] = deep_update(original[key], value)
        else:
            original[key] = value
    return original


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Загрузка config.yaml поверх значений по умолчанию.

    Если путь не указан, используется config.yaml в корне проекта;
    отсутствие файла по умолчанию не является ошибкой.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.exists():
            return config
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise ValueError(f"Некорректный формат конфигурации: {config_path}")

    return deep_update(config, user_config)


def resolve_path(path: Union[str, Path], root: Path = PROJECT_ROOT) -> Path:
    """Относительные пути конфигурации считаются от корня проекта"""
    path = Path(path)
    return path if path.is_absolute() else root / path
