import logging
import sys

ROOT_LOGGER = "jumpkit"


def setup_logger(name: str = ROOT_LOGGER, level: int = logging.INFO, log_file: str | None = None):
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # stdout belongs to the remote session or database client
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER):
    """Get a logger under the package logger, initializing console output once"""
    root = logging.getLogger(ROOT_LOGGER)

    if not root.handlers:
        root.setLevel(logging.INFO)

        # Simple console handler without timestamp for cleaner output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    return logging.getLogger(name)
