# File: src/triunity/monitoring/logging_config.py

import logging
import logging.handlers
import os
from datetime import datetime
from typing import Optional, Union

from ..utils.logger import ROOT_LOGGER_NAME


class LogConfig:
    def __init__(
        self,
        log_dir: Optional[str] = None,
        level: Union[int, str] = logging.INFO,
        max_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
    ):
        self.log_dir = log_dir
        self.level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        if not isinstance(self.level, int):
            self.level = logging.INFO
        self.max_size = max_size
        self.backup_count = backup_count

        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

    def setup_logging(self) -> logging.Logger:
        console_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
        )

        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(self.level)
        # Repeated setup (tests, reloads) must not stack handlers
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(self.level)
        logger.addHandler(console_handler)

        if self.log_dir:
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            log_file = os.path.join(
                self.log_dir,
                f'triunity_{datetime.now().strftime("%Y%m%d")}.log'
            )
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=self.max_size,
                backupCount=self.backup_count
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

        return logger
