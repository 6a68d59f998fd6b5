"""
Настройка логирования для всего проекта

Все модули пишут через loguru. aiogram и uvicorn логируют через
стандартный logging, поэтому их записи перенаправляются в те же sink'и.
"""
import logging
import sys
from pathlib import Path
from typing import Iterable

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"

# Библиотеки со стандартным logging
STDLIB_LOGGERS = ("aiogram", "uvicorn", "uvicorn.error", "uvicorn.access")


class InterceptHandler(logging.Handler):
    """Передаёт записи стандартного logging в loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Ищем кадр, из которого реально вызвали logging
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_stdlib_logging(names: Iterable[str] = STDLIB_LOGGERS, level: str = "INFO") -> None:
    """Подключает InterceptHandler к перечисленным логгерам"""
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(level)
        std_logger.propagate = False


def setup_logger(app_name: str, log_level: str = "INFO", log_dir: Path | str = "logs"):
    """
    Настраивает логгер для процесса

    Args:
        app_name: Имя приложения ('deals_bot')
        log_level: Уровень логирования (DEBUG, INFO, WARNING, ERROR)
        log_dir: Каталог для файлов логов
    """
    logger.remove()

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=log_level, colorize=True)

    # Основной файл, ротация по размеру
    logger.add(
        log_dir / f"{app_name}.log",
        format=FILE_FORMAT,
        level=log_level,
        rotation="10 MB",
        retention="1 week",
        compression="zip",
    )

    # Только ошибки, храним дольше
    logger.add(
        log_dir / f"{app_name}_errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="1 month",
        compression="zip",
    )

    intercept_stdlib_logging(level=log_level)

    logger.info(f"Logger initialized for {app_name}")
    return logger
