import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .report import AgreementTable, print_report, save_report
from ..dataset import Dataset, load_image, load_mdid
from ..fidelity import ImageMetric, compute_image_metrics
from ..statistical_analysis import AgreementStatistic, compute_agreement, describe
from ..utils import deep_update, get_logger, load_config, log_metric, resolve_path
from ..utils.logger import EvaluationLogger
from ..visualisation import plot_agreement_heatmap

logger = get_logger(__name__)

# статистики, зависящие только от порядка значений
RANK_STATISTICS = frozenset({AgreementStatistic.SROCC, AgreementStatistic.KROCC})


class MetricAgreementAnalyzer:
    """
    Сравнение метрик качества изображений с субъективными оценками.

    Этапы:
    1. Загрузка датасета MDID
    2. Вычисление метрик для каждой пары эталон / искаженное изображение
    3. Таблицы согласованности: MOS vs предоставленные метрики,
       MOS vs вычисленные метрики, предоставленные vs вычисленные
    4. Отчет (консоль, JSON, тепловые карты)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        if config is not None:
            self.config = deep_update(load_config(config_path), config)
        else:
            self.config = load_config(config_path)

        data_cfg = self.config["data"]
        self.dataset_dir = resolve_path(data_cfg["dataset_dir"])
        self.results_dir = resolve_path(data_cfg["results_dir"])
        self.figures_dir = resolve_path(data_cfg["figures_dir"])
        self.limit_references = data_cfg.get("limit_references")
        self.limit_distortions = data_cfg.get("limit_distortions")

        cmp_cfg = self.config["comparison"]
        self.opinion_score = cmp_cfg["opinion_score"]
        self.absolute = bool(cmp_cfg.get("absolute", True))
        self.plots = bool(cmp_cfg.get("plots", True))

        self.evaluators = [AgreementStatistic.parse(ev) for ev in cmp_cfg["evaluators"]]
        self.computed_metrics = [ImageMetric.parse(m) for m in cmp_cfg["computed_metrics"]]
        self.provided_metrics = list(cmp_cfg["provided_metrics"])
        self.cross_metrics = list(cmp_cfg["cross_metrics"])

        computed_names = {m.value for m in self.computed_metrics}
        unknown = set(self.cross_metrics) - computed_names
        if unknown:
            raise ValueError(
                f"Метрики для перекрестного сравнения не вычисляются: {sorted(unknown)}. "
                f"Вычисляемые метрики: {sorted(computed_names)}"
            )

        logger.info("Инициализация MetricAgreementAnalyzer")
        logger.info(f"Статистики: {[ev.value for ev in self.evaluators]}")
        logger.info(f"Вычисляемые метрики: {[m.value for m in self.computed_metrics]}")

    # ------------------------------------------------------------------ #

    def load_dataset(self) -> Dataset:
        dataset = load_mdid(self.dataset_dir)
        if self.limit_references is not None or self.limit_distortions is not None:
            dataset = dataset.limit(self.limit_references, self.limit_distortions)
            logger.info(
                f"Ограничение датасета: эталонов {len(dataset)}, искажений {dataset.n_distortions}"
            )
        return dataset

    # ------------------------------------------------------------------ #

    def compute_metrics(self, dataset: Dataset) -> int:
        """
        Заполняет computed_metrics каждого искаженного изображения.

        Ошибка чтения или несовпадение размеров пропускает одну пару,
        не останавливая обработку датасета. Возвращает число обработанных пар.
        """
        metric_names = [m.value for m in self.computed_metrics]
        processed = 0

        for reference in dataset.references:
            try:
                reference_image = load_image(reference.path)
            except Exception as e:
                logger.error(f"Эталон {reference.name} пропущен: {e}")
                continue

            for distortion in reference.distorted:
                try:
                    distorted_image = load_image(distortion.path)
                    values = compute_image_metrics(reference_image, distorted_image, metric_names)
                except Exception as e:
                    logger.error(f"Ошибка вычисления метрик для {distortion.name}: {e}")
                    continue

                distortion.computed_metrics.update(values)
                processed += 1
                logger.debug(f"Метрики для {distortion.name}: {values}")

        logger.info(f"Метрики вычислены для {processed} из {dataset.n_distortions} пар")
        return processed

    # ------------------------------------------------------------------ #

    def agreement_table(self, title: str, row_label: str,
                        series: Dict[str, Tuple[np.ndarray, np.ndarray]]) -> AgreementTable:
        """Таблица {метрика: {статистика: значение}} для набора пар рядов"""
        rows = {}
        for name, (a, b) in series.items():
            # пары с пропущенным значением исключаются из обоих рядов
            valid = ~(np.isnan(a) | np.isnan(b))
            if not np.all(valid):
                logger.warning(
                    f"Метрика {name} ('{title}'): исключено пар без значений: {int(np.sum(~valid))}"
                )
            a, b = a[valid], b[valid]

            # бесконечные значения (PSNR одинаковых изображений) допустимы только для ранговых статистик
            finite = np.isfinite(a) & np.isfinite(b)
            if not np.all(finite) and any(ev not in RANK_STATISTICS for ev in self.evaluators):
                logger.warning(
                    f"Метрика {name} ('{title}'): для статистик по значениям исключено пар "
                    f"с бесконечными значениями: {int(np.sum(~finite))}"
                )

            row = {}
            for evaluator in self.evaluators:
                if evaluator in RANK_STATISTICS:
                    value = compute_agreement(evaluator, a, b)
                else:
                    value = compute_agreement(evaluator, a[finite], b[finite])
                row[evaluator.value] = abs(value) if self.absolute else value
                log_metric(logger, evaluator.value, value, {"table": title, "metric": name})
            rows[name] = row

        frame = pd.DataFrame.from_dict(rows, orient="index", columns=[ev.value for ev in self.evaluators])
        return AgreementTable(title=title, row_label=row_label, data=frame)

    def compare(self, dataset: Dataset) -> List[AgreementTable]:
        opinion = dataset.provided_metrics_by_name(self.opinion_score)
        summary = describe(opinion[~np.isnan(opinion)])
        logger.info(f"Оценки {self.opinion_score}: {summary}")

        provided = {
            name: (opinion, dataset.provided_metrics_by_name(name))
            for name in self.provided_metrics
        }
        computed = {
            m.value: (opinion, dataset.computed_metrics_by_name(m.value))
            for m in self.computed_metrics
        }
        cross = {
            name: (dataset.provided_metrics_by_name(name), dataset.computed_metrics_by_name(name))
            for name in self.cross_metrics
        }

        score = self.opinion_score.upper()
        return [
            self.agreement_table(f"{score} vs предоставленные метрики", "pm", provided),
            self.agreement_table(f"{score} vs вычисленные метрики", "cm", computed),
            self.agreement_table("Предоставленные vs вычисленные метрики", "m", cross),
        ]

    # ------------------------------------------------------------------ #

    def report(self, tables: List[AgreementTable], dataset: Dataset) -> Path:
        print_report(tables)

        path = save_report(
            tables,
            self.results_dir / "agreement.json",
            extra={
                "project": self.config["project"]["name"],
                "n_references": len(dataset),
                "n_distortions": dataset.n_distortions,
                "absolute": self.absolute,
            }
        )

        if self.plots:
            for i, table in enumerate(tables, start=1):
                try:
                    plot_agreement_heatmap(table, f"agreement_{i}_{table.row_label}.png", self.figures_dir)
                except Exception as e:
                    logger.error(f"Ошибка построения графика '{table.title}': {e}")
        return path

    def run(self) -> List[AgreementTable]:
        start_time = time.time()
        try:
            EvaluationLogger.log_stage_start(logger, "загрузка датасета", {"dataset_dir": str(self.dataset_dir)})
            dataset = self.load_dataset()
            EvaluationLogger.log_stage_end(logger, "загрузка датасета")

            stage_start = time.time()
            EvaluationLogger.log_stage_start(logger, "вычисление метрик")
            self.compute_metrics(dataset)
            EvaluationLogger.log_stage_end(logger, "вычисление метрик", time.time() - stage_start)

            tables = self.compare(dataset)
            self.report(tables, dataset)

        except Exception as e:
            logger.error(f"Критическая ошибка сравнения метрик: {e}")
            raise

        logger.info(f"Сравнение метрик завершено за {time.time() - start_time:.2f} секунд")
        return tables
