"""Logging setup shared by every learnquest entry point"""
import logging
from typing import Optional

from learnquest.config import LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging; falls back to LOG_LEVEL from the environment"""
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    )
