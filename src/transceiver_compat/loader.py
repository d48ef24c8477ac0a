"""Dataset loading: fetch the JSON document and build an immutable snapshot."""

import gzip
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from .config import DEFAULT_DATA_SOURCE, REQUEST_TIMEOUT
from .errors import LoadError
from .models import Database

logger = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: float) -> bytes:
    """Download the dataset document. Transport failures are 'unavailable'."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        raise LoadError("unavailable", f"Request to {url} failed: {type(e).__name__}") from e
    if response.status_code != 200:
        raise LoadError("unavailable", f"{url} returned HTTP {response.status_code}")
    return response.content


def _read_file(path: Path) -> bytes:
    if not path.exists():
        raise LoadError("unavailable", f"Dataset file not found: {path}")
    try:
        if path.suffix == ".gz":
            with gzip.open(path, "rb") as f:
                return f.read()
        return path.read_bytes()
    except (gzip.BadGzipFile, EOFError) as e:
        raise LoadError("malformed", f"Corrupt gzip file {path}: {e}") from e
    except OSError as e:
        raise LoadError("unavailable", f"Cannot read {path}: {e}") from e


def parse_document(raw: bytes | str) -> Any:
    """Decode the JSON dataset document."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LoadError("malformed", f"Dataset is not valid JSON: {e}") from e


def load_snapshot(source: str | Path | None = None, timeout: float = REQUEST_TIMEOUT) -> Database:
    """Load the dataset and return a new snapshot.

    Args:
        source: File path (.json or .json.gz) or http(s) URL. Defaults to
            COMPAT_DATA_SOURCE.
        timeout: Request timeout in seconds for URL sources

    Returns:
        Database snapshot. Rows that are not objects are dropped and counted
        in ``skipped_rows``; rows with missing keys are kept with None keys.

    Raises:
        LoadError: "unavailable" if the document cannot be obtained,
            "malformed" if it does not have the three-relation shape.
    """
    source = str(source) if source is not None else DEFAULT_DATA_SOURCE

    if _is_url(source):
        raw = _fetch_url(source, timeout)
    else:
        raw = _read_file(Path(source))

    snapshot = Database.from_dict(parse_document(raw))
    logger.info(
        f"Loaded dataset from {source}: {len(snapshot.products)} products, "
        f"{len(snapshot.compatibility)} compatibility entries, "
        f"{len(snapshot.switch_bays)} switch bays"
    )
    skipped = sum(snapshot.skipped_rows.values())
    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows in {source}: {dict(snapshot.skipped_rows)}")
    return snapshot
