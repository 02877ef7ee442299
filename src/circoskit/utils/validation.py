"""Data validation utilities for circosKit."""

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from circoskit.errors import ConfigurationError

logger = logging.getLogger(__name__)

SEGMENT_REQUIRED_COLS = ["id", "len"]


def validate_columns(
    df: pd.DataFrame,
    required_cols: Optional[List[str]] = None,
    description: str = "Table",
) -> bool:
    """
    Validate that a DataFrame has the required columns.

    Args:
        df: DataFrame to validate
        required_cols: Required column names (default: segment columns)
        description: Name used in the error message

    Returns:
        True if valid, raises ConfigurationError otherwise
    """
    if required_cols is None:
        required_cols = SEGMENT_REQUIRED_COLS

    missing = [col for col in required_cols if col not in df.columns]
    if missing:
        raise ConfigurationError(f"{description} is missing required columns: {missing}")

    return True


def validate_file_exists(filepath: str, description: str = "File") -> None:
    """
    Validate that a file exists.

    Args:
        filepath: Path to check
        description: Description for error message

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not Path(filepath).exists():
        raise FileNotFoundError(f"{description} not found: {filepath}")
