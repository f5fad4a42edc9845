"""
Загрузка датасета MDID с диска.

Ожидаемая структура каталога:

    <dataset_dir>/
        reference_images/   img01.bmp, img02.bmp, ...
        distortion_images/  img01_1_1.bmp, ...
        metrics_results/    PSNR.txt, SSIM.txt, ... (по значению на строку)
        mos.txt
        mos_std.txt

Строка i файла оценок относится к эталону i // k и искажению i % k, где k -
число искаженных изображений на эталон (файлы упорядочены по имени).
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from ..utils.logger import get_logger

logger = get_logger(__name__)

REFERENCE_NAME_PATTERN = re.compile(r"^img\d{2}")
IMAGE_SUFFIX = ".bmp"
SCORES_SUFFIX = ".txt"


@dataclass
class Distortion:
    """Искаженное изображение и его метрики относительно эталона"""
    path: Path
    info: str = ""
    provided_metrics: Dict[str, float] = field(default_factory=dict)
    computed_metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path.stem


@dataclass
class Reference:
    """Эталонное изображение и его искаженные версии"""
    path: Path
    distorted: List[Distortion] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.stem


@dataclass
class Dataset:
    references: List[Reference] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.references)

    @property
    def n_distortions(self) -> int:
        return sum(len(ref.distorted) for ref in self.references)

    def iter_pairs(self) -> Iterator[Tuple[Reference, Distortion]]:
        for reference in self.references:
            for distortion in reference.distorted:
                yield reference, distortion

    def provided_metrics_by_name(self, name: str) -> np.ndarray:
        """Ряд значений предоставленной метрики в порядке датасета (NaN, если значения нет)"""
        return np.array(
            [dis.provided_metrics.get(name, np.nan) for _, dis in self.iter_pairs()],
            dtype=np.float64
        )

    def computed_metrics_by_name(self, name: str) -> np.ndarray:
        return np.array(
            [dis.computed_metrics.get(name, np.nan) for _, dis in self.iter_pairs()],
            dtype=np.float64
        )

    def provided_metric_names(self) -> List[str]:
        names = set()
        for _, dis in self.iter_pairs():
            names.update(dis.provided_metrics)
        return sorted(names)

    def limit(self, n_references: Optional[int] = None, n_distortions: Optional[int] = None) -> "Dataset":
        """Подмножество датасета: первые эталоны и первые искажения каждого из них"""
        references = self.references if n_references is None else self.references[:n_references]
        return Dataset([
            Reference(
                path=ref.path,
                distorted=ref.distorted if n_distortions is None else ref.distorted[:n_distortions]
            )
            for ref in references
        ])


class MDIDLoader:
    """
    Загрузчик датасета MDID
    """

    def __init__(self, dataset_dir: Union[str, Path]):
        self.dataset_dir = Path(dataset_dir)
        self.references_dir = self.dataset_dir / "reference_images"
        self.distortions_dir = self.dataset_dir / "distortion_images"
        self.metrics_dir = self.dataset_dir / "metrics_results"

    @staticmethod
    def _list_files(directory: Path, suffix: str) -> List[Path]:
        files = []
        for path in sorted(directory.iterdir()):
            if path.is_dir():
                logger.debug(f"Пропуск каталога: {path.name}")
                continue
            if path.suffix.lower() != suffix:
                logger.debug(f"Пропуск файла (не {suffix}): {path.name}")
                continue
            files.append(path)
        return files

    def _load_references(self) -> Tuple[List[Reference], Dict[str, int]]:
        if not self.references_dir.is_dir():
            raise FileNotFoundError(f"Каталог эталонных изображений не найден: {self.references_dir}")

        logger.info(f"Загрузка эталонных изображений из {self.references_dir}")
        references = []
        index = {}
        for path in self._list_files(self.references_dir, IMAGE_SUFFIX):
            references.append(Reference(path=path))
            index[path.stem] = len(references) - 1
        return references, index

    def _load_distortions(self, references: List[Reference], index: Dict[str, int]):
        if not self.distortions_dir.is_dir():
            raise FileNotFoundError(f"Каталог искаженных изображений не найден: {self.distortions_dir}")

        logger.info(f"Загрузка искаженных изображений из {self.distortions_dir}")
        for path in self._list_files(self.distortions_dir, IMAGE_SUFFIX):
            match = REFERENCE_NAME_PATTERN.match(path.name)
            if match is None:
                logger.warning(f"Невозможно определить эталон для {path.name}")
                continue

            reference_name = match.group(0)
            if reference_name not in index:
                logger.warning(f"Нет эталонного изображения {reference_name} для {path.name}")
                continue

            info = path.stem[len(reference_name):].lstrip("_")
            references[index[reference_name]].distorted.append(Distortion(path=path, info=info))

    @staticmethod
    def read_scores(path: Path) -> List[float]:
        """
        Значения по одному на строку до первой пустой строки.

        Нечисловые значения заменяются на NaN.
        """
        values = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f.read().splitlines():
                line = line.strip()
                if not line:
                    break
                try:
                    values.append(float(line))
                except ValueError:
                    logger.warning(f"Нечисловое значение '{line}' в {path.name}, заменено на NaN")
                    values.append(float("nan"))
        return values

    @staticmethod
    def _assign_scores(references: List[Reference], name: str, values: List[float]):
        if not references or not references[0].distorted:
            return

        per_reference = len(references[0].distorted)
        for i, value in enumerate(values):
            ri, di = divmod(i, per_reference)
            if ri >= len(references) or di >= len(references[ri].distorted):
                logger.warning(f"Лишние значения в {name}: строка {i + 1} не соответствует изображению")
                break
            references[ri].distorted[di].provided_metrics[name] = value

    def _load_provided_metrics(self, references: List[Reference]):
        if not self.metrics_dir.is_dir():
            logger.warning(f"Каталог предоставленных метрик не найден: {self.metrics_dir}")
            return

        for path in self._list_files(self.metrics_dir, SCORES_SUFFIX):
            try:
                values = self.read_scores(path)
            except OSError as e:
                logger.error(f"Ошибка чтения файла метрик {path}: {e}")
                continue
            self._assign_scores(references, path.stem, values)
            logger.debug(f"Метрика {path.stem}: {len(values)} значений")

    def _load_opinion_scores(self, references: List[Reference]):
        for name in ("mos", "mos_std"):
            path = self.dataset_dir / f"{name}{SCORES_SUFFIX}"
            if not path.exists():
                logger.warning(f"Файл оценок {name} не найден: {path}")
                continue
            self._assign_scores(references, name, self.read_scores(path))

    def load(self) -> Dataset:
        logger.info(f"Загрузка датасета MDID: {self.dataset_dir}")

        references, index = self._load_references()
        self._load_distortions(references, index)
        self._load_provided_metrics(references)
        self._load_opinion_scores(references)

        dataset = Dataset(references)
        logger.info(
            f"Загружено эталонов: {len(dataset)}, искаженных изображений: {dataset.n_distortions}"
        )
        return dataset


def load_mdid(dataset_dir: Union[str, Path]) -> Dataset:
    return MDIDLoader(dataset_dir).load()
