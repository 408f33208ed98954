"""
Disk persistence for exports, security reports and the cache's second tier.

Writes go through a temporary file in the target directory and are moved
into place, so a reader never sees a half-written export or cache entry.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from .logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


def ensure_directory(directory: Union[Path, str]) -> Path:
    """Create ``directory`` (and parents) if needed and return it as a Path."""
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_atomic(data: bytes, filepath: Union[Path, str]) -> Path:
    """
    Replace ``filepath`` with ``data`` in one step.

    The temporary file is hidden (leading dot) so directory globs such as
    the cache's ``app_cache_*.json`` never pick it up.

    Returns:
        Path the data was written to
    """
    path = Path(filepath)
    ensure_directory(path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return path


def save_json(data: Any, filepath: Union[Path, str], indent: Optional[int] = 2) -> Path:
    """
    Save rows, reports or cache entries as JSON.

    Dates, UUIDs and other values JSON can't represent are written with
    ``str``. Pass ``indent=None`` for compact output.
    """
    text = json.dumps(data, indent=indent, ensure_ascii=False, default=str)
    path = write_atomic(text.encode("utf-8"), filepath)
    logger.debug(f"Saved JSON to {path}")
    return path


def save_bytes(data: bytes, filepath: Union[Path, str]) -> Path:
    """Write binary export output (DOCX/PDF) to disk."""
    path = write_atomic(data, filepath)
    logger.debug(f"Saved {len(data)} bytes to {path}")
    return path


def load_json(filepath: Union[Path, str], default: Any = _MISSING) -> Any:
    """
    Load data from a JSON file.

    Args:
        filepath: Path to the JSON file
        default: Returned when the file does not exist; without it a
            missing file raises

    Raises:
        FileNotFoundError: If the file is missing and no default was given
        ValueError: If the file is not valid JSON
    """
    path = Path(filepath)

    if not path.exists():
        if default is not _MISSING:
            return default
        logger.error(f"JSON file not found: {path}")
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    logger.debug(f"Loaded JSON from {path}")
    return data


def load_json_or_discard(filepath: Union[Path, str]) -> Optional[Any]:
    """
    Load a JSON file that may be stale or damaged.

    An unreadable or corrupt file is deleted and None returned, which
    suits disposable data like cache entries.
    """
    path = Path(filepath)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"Discarding unreadable JSON file {path.name}: {e}")
        path.unlink(missing_ok=True)
        return None
