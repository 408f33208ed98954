"""Utility modules."""

from .logger import RequestContextFilter, get_logger, setup_logging
from .file_utils import ensure_directory, load_json, load_json_or_discard, save_bytes, save_json, write_atomic
from .math_utils import round_half_up
from .paths import (
    get_export_path,
    get_report_path,
    safe_name,
    DATA_DIR,
    EXPORTS_DIR,
    REPORTS_DIR,
    CACHE_DIR,
    LOGS_DIR,
)
from .sanitize import escape_text, sanitize_filename, sanitize_html, sanitize_url, strip_html

__all__ = [
    "RequestContextFilter",
    "get_logger",
    "setup_logging",
    "ensure_directory",
    "write_atomic",
    "save_json",
    "load_json",
    "load_json_or_discard",
    "save_bytes",
    "round_half_up",
    "get_export_path",
    "get_report_path",
    "safe_name",
    "DATA_DIR",
    "EXPORTS_DIR",
    "REPORTS_DIR",
    "CACHE_DIR",
    "LOGS_DIR",
    "escape_text",
    "sanitize_filename",
    "sanitize_html",
    "sanitize_url",
    "strip_html",
]
