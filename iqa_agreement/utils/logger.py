import logging
import logging.handlers
import sys
import json
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any
import yaml

from .config import PROJECT_ROOT, deep_update

ROOT_LOGGER_NAME = 'iqa'


class CustomFormatter(logging.Formatter):
    """Форматтер с временными метками до миллисекунд"""

    def format(self, record):
        record.timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        return super().format(record)


class MetricsFilter(logging.Filter):
    """Фильтр для отбора записей METRIC"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = getattr(record, 'msg', '')
        return isinstance(message, str) and message.startswith('METRIC ')


class EvaluationLogger:
    """
    Логгер оценки метрик качества изображений с ротацией файлов.

    Пишет три файла в logs/<дата>/:
    - evaluation.log : все сообщения
    - metrics.log    : только записи METRIC в JSON
    - errors.log     : WARNING и выше
    """

    def __init__(self, config_path: Optional[str] = None, log_subdir: Optional[str] = None,
                 log_root: Optional[Path] = None):
        self.root_dir = PROJECT_ROOT
        self.config = self._load_config(config_path)

        base_dir = Path(log_root) if log_root is not None else self.root_dir / "logs"
        if log_subdir:
            self.log_dir = base_dir / log_subdir
        else:
            self.log_dir = base_dir / datetime.now().strftime('%Y-%m-%d')

        self._setup_logging()

    def _load_config(self, config_path: Optional[str]) -> Dict[str, Any]:
        """Загружает секцию logging из конфигурации или берет значения по умолчанию"""
        default_config = {
            'console_level': 'INFO',
            'file_level': 'DEBUG',
            'rotation': {
                'backup_count': 5,
                'when': 'D',
                'interval': 1,
            },
            'formats': {
                'detailed': '%(timestamp)s - %(name)-40s - %(levelname)-8s - %(message)s',
                'console': '%(asctime)s - %(levelname)-8s [%(name)s] %(message)s',
            }
        }

        if config_path and Path(config_path).exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                print(f"Ошибка загрузки конфигурации логирования: {e}. Использую настройки по умолчанию")
                return default_config
            if 'logging' in user_config:
                return deep_update(default_config, user_config['logging'])

        return default_config

    def _setup_logging(self):
        """Настраивает корневой логгер iqa"""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        main_logger = logging.getLogger(ROOT_LOGGER_NAME)
        main_logger.setLevel(logging.DEBUG)
        for handler in list(main_logger.handlers):
            handler.close()
        main_logger.handlers.clear()

        self._setup_console_handler(main_logger)
        self._setup_file_handlers(main_logger)

        main_logger.info("=" * 60)
        main_logger.info("СИСТЕМА ЛОГИРОВАНИЯ ИНИЦИАЛИЗИРОВАНА")
        main_logger.info(f"Директория логов: {self.log_dir}")
        main_logger.info("=" * 60)

    def _setup_console_handler(self, logger: logging.Logger):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.config['console_level']))
        console_handler.setFormatter(logging.Formatter(self.config['formats']['console'], datefmt='%H:%M:%S'))
        logger.addHandler(console_handler)

    def _rotating_handler(self, filename: str) -> logging.Handler:
        rotation = self.config['rotation']
        return logging.handlers.TimedRotatingFileHandler(
            filename=self.log_dir / filename,
            when=rotation['when'],
            interval=rotation['interval'],
            backupCount=rotation['backup_count'],
            encoding='utf-8'
        )

    def _setup_file_handlers(self, logger: logging.Logger):
        """Основной файл, файл метрик и файл ошибок"""
        main_handler = self._rotating_handler("evaluation.log")
        main_handler.setLevel(getattr(logging, self.config['file_level']))
        main_handler.setFormatter(CustomFormatter(self.config['formats']['detailed']))
        logger.addHandler(main_handler)

        metrics_handler = self._rotating_handler("metrics.log")
        metrics_handler.setLevel(logging.INFO)
        metrics_handler.addFilter(MetricsFilter())
        metrics_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(metrics_handler)

        error_handler = self._rotating_handler("errors.log")
        error_handler.setLevel(logging.WARNING)
        error_handler.setFormatter(CustomFormatter('%(timestamp)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(error_handler)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """Именованный логгер модуля внутри иерархии iqa"""
        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
            return logging.getLogger(name)
        return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')

    @staticmethod
    def log_metric(logger: logging.Logger, metric_name: str, value: float,
                   context: Optional[Dict] = None):
        """Логирует метрику в структурированном JSON формате"""
        metric_data = {
            'metric': metric_name,
            'value': float(value),
            'timestamp': datetime.now().isoformat(),
            'context': context or {}
        }
        logger.info(f"METRIC {json.dumps(metric_data, ensure_ascii=False)}")

    @staticmethod
    def log_stage_start(logger: logging.Logger, stage_name: str, params: Optional[Dict] = None):
        logger.info("┌─ НАЧАЛО ЭТАПА: %s", stage_name)
        if params:
            logger.debug("│ Параметры: %s", params)

    @staticmethod
    def log_stage_end(logger: logging.Logger, stage_name: str, execution_time: Optional[float] = None):
        if execution_time is not None:
            logger.info("└─ ЗАВЕРШЕНИЕ ЭТАПА: %s (время: %.2fс)", stage_name, execution_time)
        else:
            logger.info("└─ ЗАВЕРШЕНИЕ ЭТАПА: %s", stage_name)


_evaluation_logger = None


def setup_logging(config_path: Optional[str] = None, log_subdir: Optional[str] = None,
                  log_root: Optional[Path] = None) -> EvaluationLogger:
    """Инициализирует систему логирования (один раз на процесс)"""
    global _evaluation_logger
    if _evaluation_logger is None:
        _evaluation_logger = EvaluationLogger(config_path, log_subdir, log_root)
    return _evaluation_logger


def get_logger(name: str) -> logging.Logger:
    """
    Возвращает именованный логгер.

    Обработчики не создаются: модули ядра только пишут в иерархию iqa,
    а файлы и консоль подключает setup_logging() в точке входа.
    """
    return EvaluationLogger.get_logger(name)


def log_metric(logger: logging.Logger, metric_name: str, value: float,
               context: Optional[Dict] = None):
    """Логирует метрику"""
    EvaluationLogger.log_metric(logger, metric_name, value, context)
