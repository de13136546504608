"""Logging and profiling settings driven by command-line flags and environment."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from . import version

ENV_LOG_FILE = "ORCHESTRION_LOG_FILE"
ENV_LOG_LEVEL = "ORCHESTRION_LOG_LEVEL"
ENV_PROFILE_PATH = "ORCHESTRION_PROFILE_PATH"
ENV_ENABLED_PROFILES = "ORCHESTRION_ENABLED_PROFILES"
ENV_TOOLEXEC_IMPORT_PATH = "TOOLEXEC_IMPORTPATH"

TRACE = 5
PANIC = logging.CRITICAL + 5
DISABLED = logging.CRITICAL + 100

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(PANIC, "PANIC")

LOGGER_NAME = "orchestrion"

_NAMED_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": PANIC,
    "disabled": DISABLED,
    "": DISABLED,
}

# Numeric levels, in the order the named levels above take.
_NUMERIC_LEVELS = {
    -1: TRACE,
    0: logging.DEBUG,
    1: logging.INFO,
    2: logging.WARNING,
    3: logging.ERROR,
    4: logging.CRITICAL,
    5: PANIC,
}

_LEVEL_LABELS = {level: name for name, level in _NAMED_LEVELS.items() if name not in ("", "disabled")}


@dataclass
class _Settings:
    level_set: bool = False
    level: int = DISABLED


_settings = _Settings()


def parse_log_level(value: str) -> int:
    """Return the logging level named by ``value`` (case-insensitive, or numeric)."""
    named = _NAMED_LEVELS.get(value.lower())
    if named is not None:
        return named
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"Unknown Level String: '{value}', defaulting to NoLevel") from None
    if not -128 <= number <= 127:
        raise ValueError(f"Out-Of-Bounds Level: '{number}', defaulting to NoLevel")
    if number < -1:
        return TRACE
    return _NUMERIC_LEVELS.get(number, DISABLED)


def set_log_level(value: str) -> int:
    """Set the log level, exporting it to child processes; return the level."""
    os.environ[ENV_LOG_LEVEL] = value
    try:
        level = parse_log_level(value)
    except ValueError as exc:
        raise ValueError(f"invalid log level {json.dumps(value)}: {exc}") from exc
    logging.getLogger(LOGGER_NAME).setLevel(level)
    _settings.level_set = True
    _settings.level = level
    return level


def _is_alnum(char: str) -> bool:
    return char == "_" or ("0" <= char <= "9") or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_special(char: str) -> bool:
    return char in "*#$@!?-" or "0" <= char <= "9"


def _shell_name(text: str) -> tuple[str, int]:
    if text[0] == "{":
        if len(text) > 2 and _is_special(text[1]) and text[2] == "}":
            return text[1], 3
        close = text.find("}", 1)
        if close == 1:
            return "", 2
        if close < 0:
            return "", 1
        return text[1:close], close + 1
    if _is_special(text[0]):
        return text[0], 1
    width = 0
    while width < len(text) and _is_alnum(text[width]):
        width += 1
    return text[:width], width


def _expand(text: str, mapping: Callable[[str], str]) -> str:
    out: list[str] = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char != "$" or pos + 1 >= len(text):
            out.append(char)
            pos += 1
            continue
        name, width = _shell_name(text[pos + 1:])
        if name:
            out.append(mapping(name))
        elif width == 0:
            out.append("$")
        pos += 1 + width
    return "".join(out)


def log_file_name(path: str, pid: int) -> str:
    """Expand ``$PID`` (or ``${PID}``) in ``path``; other variables stay as ``$NAME``."""
    return _expand(path, lambda name: str(pid) if name == "PID" else f"${name}")


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": _LEVEL_LABELS.get(record.levelno, record.levelname.lower()),
            **common_context(),
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .astimezone()
            .isoformat(timespec="seconds"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def set_log_file(path: str) -> logging.FileHandler:
    """Send log output to ``path`` as JSON lines instead of standard error.

    The log level defaults to warnings unless one was set. The returned handler
    is to be closed once logging is over.
    """
    if not os.path.isabs(path):
        try:
            path = os.path.join(os.getcwd(), path)
        except OSError:
            pass
    os.environ[ENV_LOG_FILE] = path
    filename = log_file_name(path, os.getpid())
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = logging.FileHandler(filename, mode="a", encoding="utf-8")
    handler.setFormatter(_JsonFormatter())

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(_settings.level if _settings.level_set else logging.WARNING)
    return handler


def profile_path(directory: str, name_format: str) -> str:
    """Return the profile file path in ``directory``, named with the process id."""
    return os.path.join(directory, name_format % os.getpid())


def common_context() -> dict[str, object]:
    """Return the fields attached to every log entry."""
    context: dict[str, object] = {
        "orchestrion": version.tag(),
        "pid": os.getpid(),
        "ppid": os.getppid(),
    }
    import_path = os.environ.get(ENV_TOOLEXEC_IMPORT_PATH, "")
    if import_path:
        context[ENV_TOOLEXEC_IMPORT_PATH] = import_path
    return context