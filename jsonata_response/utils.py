"""
Utility functions for the JSONata response tag.
"""

import logging
import sys
from typing import Optional


def setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Reduce noise from third-party libraries unless debugging
    if level.upper() != "DEBUG":
        for name in ("jsonata", "jsonschema"):
            logging.getLogger(name).setLevel(logging.WARNING)


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_length:
        return text
    return text[:max_length-3] + "..."
