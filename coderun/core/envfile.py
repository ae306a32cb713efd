"""Parsing of ``KEY=VALUE`` environment files passed with ``--env-file``."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .errors import EnvFileError

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env_lines(lines: list[str]) -> dict[str, str]:
    """Parse environment file lines into a mapping.

    Blank lines and ``#`` comments are skipped. Each remaining line is split
    on the first ``=``; key and value are trimmed and one pair of matching
    quotes around the value is removed. When a key repeats, the last
    occurrence wins.

    Args:
        lines: Raw lines, with or without trailing newlines

    Returns:
        Mapping of variable names to values

    Raises:
        EnvFileError: On a line without ``=`` or with an empty key
    """
    env_vars: dict[str, str] = {}

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise EnvFileError(
                f"invalid format at line {line_number}: {line} (expected KEY=VALUE)",
                line_number=line_number,
            )

        key = key.strip()
        if not key:
            raise EnvFileError(
                f"empty key at line {line_number}", line_number=line_number
            )

        env_vars[key] = _unquote(value.strip())

    return env_vars


def parse_env_file(path: str | Path) -> dict[str, str]:
    """Read and parse an environment file.

    Raises:
        EnvFileError: If the file cannot be read or a line is malformed
    """
    env_path = Path(path)
    try:
        # newline="" keeps lone \r and other separators inside values
        with open(env_path, encoding="utf-8", newline="") as env_file:
            content = env_file.read()
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(f"failed to open env file '{env_path}': {e}") from e

    # only \n ends a line; a trailing \r is trimmed with the other whitespace
    env_vars = parse_env_lines(content.split("\n"))
    logger.debug(f"Parsed {len(env_vars)} variables from {env_path}")
    return env_vars
