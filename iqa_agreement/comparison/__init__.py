"""
Модуль сравнения метрик качества с субъективными оценками
"""

from .report import (
    AgreementTable,
    format_table,
    print_report,
    save_report,
    tables_from_json,
)

from .analyzer import (
    MetricAgreementAnalyzer
)

__all__ = [
    "AgreementTable",
    "format_table",
    "print_report",
    "save_report",
    "tables_from_json",
    "MetricAgreementAnalyzer",
]
