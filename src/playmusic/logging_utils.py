from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, Sequence
from textwrap import wrap
from typing import TextIO, Union

DEFAULT_WRAP_WIDTH = 100
DEFAULT_LABEL_WIDTH = 18
DEFAULT_INDENT = "    "

LOG_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_LOG_FORMAT = "%(levelname)s: [%(name)s] %(message)s"

FieldMapping = Union[Mapping[str, object], Sequence[tuple[str, object]]]


def display_text(value: str) -> str:
    """Return ``value`` safe to write to a UTF-8 stream.

    File names that are not valid UTF-8 come back from the filesystem with
    surrogate escapes. Their raw bytes are shown as ``\\xNN`` escapes instead.
    """
    return os.fsencode(value).decode("utf-8", "backslashreplace")


def _coerce_items(fields: FieldMapping) -> list[tuple[str, object]]:
    if isinstance(fields, Mapping):
        return list(fields.items())
    return list(fields)


def _stringify(value: object) -> str:
    if value is None:
        return "(none)"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str):
        return display_text(value.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(_stringify(item) for item in value) or "(none)"
    return str(value)


def render_fields_block(title: str, fields: FieldMapping, *, wrap_width: int = DEFAULT_WRAP_WIDTH) -> str:
    """Render a titled block of ``label: value`` lines for multi-field log messages."""
    items = _coerce_items(fields)
    lines = [title]
    if not items:
        return title

    label_width = min(max(len(str(key)) for key, _ in items), DEFAULT_LABEL_WIDTH)
    value_width = max(wrap_width - len(DEFAULT_INDENT) - label_width - 2, 32)
    for key, value in items:
        wrapped = wrap(_stringify(value), width=value_width) or [""]
        lines.append(f"{DEFAULT_INDENT}{str(key):<{label_width}}: {wrapped[0]}")
        for continuation in wrapped[1:]:
            lines.append(f"{DEFAULT_INDENT}{'':<{label_width}}  {continuation}")
    return "\n".join(lines)


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def parse_log_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def configure_logging(
    level: str | int = logging.INFO,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> logging.Logger:
    """Route ``playmusic`` log records to the terminal.

    Records below WARNING go to standard output, WARNING and above to
    standard error, each prefixed with its level name.
    """
    numeric_level = parse_log_level(level)
    log_format = VERBOSE_LOG_FORMAT if numeric_level <= logging.DEBUG else LOG_FORMAT
    formatter = logging.Formatter(log_format)

    info_handler = logging.StreamHandler(stdout or sys.stdout)
    info_handler.setLevel(numeric_level)
    info_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    info_handler.setFormatter(formatter)

    error_handler = logging.StreamHandler(stderr or sys.stderr)
    error_handler.setLevel(max(numeric_level, logging.WARNING))
    error_handler.setFormatter(formatter)

    logger = logging.getLogger("playmusic")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(info_handler)
    logger.addHandler(error_handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
    return logger
