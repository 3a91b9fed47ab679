# src/chemcore/utils/logging_setup.py

import logging
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    verbose: bool = False, log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Configure logging for the chemcore package.

    Args:
        verbose: Log at DEBUG to the console instead of WARNING
        log_file: Optional file that receives every record at DEBUG

    Returns:
        The package logger
    """
    logger = logging.getLogger("chemcore")
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
