"""
Главный сценарий сравнения метрик качества изображений с оценками MOS
"""

import sys
import os
import argparse
from pathlib import Path

script_path = os.path.abspath(__file__)
root_dir = Path(script_path).parent
sys.path.insert(0, str(root_dir))

import time

from iqa_agreement import (
    setup_logging,
    get_logger,
    MetricAgreementAnalyzer,
)


def parse_args():
    parser = argparse.ArgumentParser(description="Сравнение метрик качества изображений с MOS")
    parser.add_argument("--config", default=str(root_dir / "config.yaml"), help="Путь к config.yaml")
    parser.add_argument("--dataset", default=None, help="Каталог датасета MDID (перекрывает конфиг)")
    return parser.parse_args()


# Пайплайн
def main():
    args = parse_args()
    start_time = time.time()

    # --------------------------------------------------
    # Инициализация
    # --------------------------------------------------

    setup_logging(args.config)
    logger = get_logger("pipeline")

    logger.info("=== Запуск сравнения метрик качества ===")

    overrides = {}
    if args.dataset is not None:
        overrides = {"data": {"dataset_dir": args.dataset}}

    # --------------------------------------------------
    # Сравнение метрик
    # --------------------------------------------------

    analyzer = MetricAgreementAnalyzer(config=overrides, config_path=args.config)
    analyzer.run()

    execution_time = time.time() - start_time
    logger.info(f"=== Пайплайн успешно завершён за {execution_time:.2f} секунд ===")


# ======================================================================
# Входная точка
# ======================================================================

if __name__ == "__main__":
    main()
