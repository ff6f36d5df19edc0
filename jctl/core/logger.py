"""
Logging setup for jctl commands using loguru

Log lines go to stderr so reports printed on stdout (including --json
output) stay machine-readable.
"""

from loguru import logger
import sys

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logger(level: str = "INFO"):
    """Send jctl log records at ``level`` and above to stderr"""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True,
               filter=lambda record: record["name"].startswith("jctl"))
    return logger
