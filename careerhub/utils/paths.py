"""
Path constants and utilities for export, report and log files.
"""

import re
from pathlib import Path
from datetime import datetime
from typing import Optional, Union


# Base directories
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
EXPORTS_DIR = DATA_DIR / "exports"
REPORTS_DIR = DATA_DIR / "reports"
CACHE_DIR = DATA_DIR / "cache"
LOGS_DIR = DATA_DIR / "logs"


def ensure_data_directories(*directories: Union[Path, str]):
    """Ensure the given data directories exist (the default layout when none are given)."""
    for directory in directories or (DATA_DIR, EXPORTS_DIR, REPORTS_DIR, CACHE_DIR, LOGS_DIR):
        Path(directory).mkdir(parents=True, exist_ok=True)


def safe_name(value: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return re.sub(r'[^A-Za-z0-9]', '_', value or '')


def get_export_path(
    filename: str,
    extension: str,
    exports_dir: Union[Path, str, None] = None,
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Get path for an exported document, organized by date.

    Args:
        filename: Base filename without extension
        extension: File extension without dot
        exports_dir: Root directory for exports, defaults to EXPORTS_DIR
        timestamp: Optional timestamp, defaults to now

    Returns:
        Path object for the export file
    """
    if timestamp is None:
        timestamp = datetime.now()

    root = Path(exports_dir) if exports_dir else EXPORTS_DIR
    export_dir = root / timestamp.strftime("%Y-%m-%d")
    export_dir.mkdir(parents=True, exist_ok=True)
    return export_dir / f"{filename}.{extension}"


def get_report_path(
    report_type: str,
    reports_dir: Union[Path, str, None] = None,
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Get path for a JSON diagnostics report (e.g. 'pentest-report').

    Reports are named by date, one per type per day.
    """
    if timestamp is None:
        timestamp = datetime.now()

    root = Path(reports_dir) if reports_dir else REPORTS_DIR
    root.mkdir(parents=True, exist_ok=True)
    return root / f"{report_type}-{timestamp.strftime('%Y-%m-%d')}.json"

