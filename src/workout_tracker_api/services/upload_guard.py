"""Pre-parse checks for uploaded workout plan files.

A shallow safety net, not a sandbox: it bounds the file size, refuses a short
blocklist of suspicious substrings, parses the JSON and bounds the size of
the parsed object.
"""

import json
import logging
import re
from typing import Any, Optional

from workout_tracker_api.config import settings

logger = logging.getLogger(__name__)

SUSPICIOUS_PATTERNS = [
    (re.compile(r"<\s*script", re.IGNORECASE), "script tag"),
    (re.compile(r"javascript\s*:", re.IGNORECASE), "javascript URL"),
    (re.compile(r"\beval\s*\(", re.IGNORECASE), "eval call"),
    (re.compile(r"data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE), "inline base64 data URI"),
]


class UploadRejected(RuntimeError):
    """The uploaded file failed a pre-parse check."""


class UploadTooLarge(UploadRejected):
    """The upload exceeds the byte or parsed-size limit."""


def count_json_nodes(value: Any) -> int:
    """Number of values in a parsed JSON document (containers included)."""
    count = 0
    stack = [value]
    while stack:
        node = stack.pop()
        count += 1
        if isinstance(node, dict):
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return count


def load_workout_upload(
    content: bytes,
    filename: Optional[str] = None,
    max_bytes: Optional[int] = None,
    max_nodes: Optional[int] = None,
) -> Any:
    """
    Check and parse an uploaded workout plan.

    Args:
        content: Raw file bytes
        filename: Original file name; must end in .json when given
        max_bytes: Byte limit (defaults to settings.MAX_UPLOAD_BYTES)
        max_nodes: Parsed-object size limit (defaults to settings.MAX_JSON_NODES)

    Returns:
        The parsed JSON value

    Raises:
        UploadTooLarge: if a size limit is exceeded
        UploadRejected: if any other check fails
    """
    max_bytes = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    max_nodes = settings.MAX_JSON_NODES if max_nodes is None else max_nodes

    if filename is not None and not filename.lower().endswith(".json"):
        raise UploadRejected("Please select a JSON file")

    if len(content) > max_bytes:
        raise UploadTooLarge(
            f"File is too large ({len(content) / 1024:.1f} KB, limit {max_bytes / 1024:.0f} KB)"
        )

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UploadRejected(f"File is not valid UTF-8: {e}") from e

    for pattern, label in SUSPICIOUS_PATTERNS:
        if pattern.search(text):
            logger.warning(f"Rejected upload {filename!r}: contains {label}")
            raise UploadRejected(f"File contains suspicious content ({label})")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise UploadRejected(f"Failed to parse JSON: {e}") from e

    nodes = count_json_nodes(data)
    if nodes > max_nodes:
        raise UploadTooLarge(f"JSON document is too large ({nodes} values, limit {max_nodes})")

    return data
