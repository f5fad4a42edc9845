import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..utils import get_logger, load_json

logger = get_logger(__name__)


@dataclass
class AgreementTable:
    """Таблица согласованности: строки - метрики, столбцы - статистики"""
    title: str
    row_label: str
    data: pd.DataFrame

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "row_label": self.row_label,
            "rows": {
                str(metric): {str(ev): _json_value(v) for ev, v in row.items()}
                for metric, row in self.data.iterrows()
            }
        }


def _json_value(value: Any):
    """NaN -> null, бесконечности -> строки 'inf' / '-inf'"""
    value = float(value)
    if math.isnan(value):
        return None
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def format_table(table: AgreementTable, width: int = 10) -> str:
    """Текстовая таблица фиксированной ширины для консоли"""
    lines = [table.title, ""]

    corner = table.row_label + "\\ev"
    header = f"{corner:>{width}}"
    header += "".join(f"{str(column):>{width}}" for column in table.data.columns)
    lines.append(header)

    for metric, row in table.data.iterrows():
        line = f"{str(metric):>{width}}"
        line += "".join(f"{value:>{width}.6f}" for value in row.values)
        lines.append(line)

    return "\n".join(lines)


def print_report(tables: Sequence[AgreementTable]):
    for table in tables:
        print()
        print(format_table(table))
    print()


def save_report(tables: Sequence[AgreementTable], path: Path, extra: Optional[Dict[str, Any]] = None) -> Path:
    """Сохранение таблиц согласованности в JSON"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    report: Dict[str, Any] = dict(extra or {})
    report["tables"] = [table.to_dict() for table in tables]

    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    logger.info(f"Отчет сохранен: {path}")
    return path


def tables_from_json(path: Path) -> List[AgreementTable]:
    """Обратное чтение таблиц из сохраненного отчета (для визуализации)"""
    report = load_json(path)

    tables = []
    for block in report.get("tables", []):
        frame = pd.DataFrame.from_dict(block["rows"], orient="index").astype(float)
        tables.append(AgreementTable(block["title"], block["row_label"], frame))
    return tables
