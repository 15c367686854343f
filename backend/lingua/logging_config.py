import logging
import os
from logging.handlers import RotatingFileHandler

from .settings import settings


def setup_logging() -> None:
	logger = logging.getLogger("lingua")
	logger.setLevel(settings.log_level.upper())

	if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
		os.makedirs(settings.log_dir, exist_ok=True)
		log_path = os.path.join(settings.log_dir, settings.log_file)
		file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
		file_handler.setFormatter(
			logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
		)
		logger.addHandler(file_handler)
	# Also configure root logger to see logs from other libraries
	logging.basicConfig(level=logging.INFO)
	logging.getLogger("passlib").setLevel(logging.ERROR)
