"""CPU and memory quantity checks.

Only the shape of the value is checked here. Range checks (for example a
memory limit above the account quota) are left to the platform.
"""

from __future__ import annotations

from typing import Literal

from .errors import ValidationError

QuantityKind = Literal["cpu", "memory"]

MEMORY_SUFFIXES: tuple[str, ...] = ("Ki", "Mi", "Gi")


def _is_decimal(value: str) -> bool:
    """Digits with at most one dot, e.g. ``1``, ``0.5`` or ``.5``."""
    return value.count(".") <= 1 and all(ch.isdigit() or ch == "." for ch in value)


def is_valid_quantity(value: str | None, kind: QuantityKind) -> bool:
    if not value:
        return True
    if kind == "cpu":
        return value.endswith("m") or _is_decimal(value)
    if kind == "memory":
        return value.endswith(MEMORY_SUFFIXES)
    raise ValueError(f"Unknown quantity kind: {kind}")


def validate_quantity(value: str | None, kind: QuantityKind) -> None:
    """Validate a resource quantity string.

    Args:
        value: Quantity as typed by the user. Empty means platform default.
        kind: ``"cpu"`` or ``"memory"``

    Raises:
        ValidationError: If the value does not have an accepted shape
    """
    if is_valid_quantity(value, kind):
        return

    if kind == "cpu":
        raise ValidationError(
            f"Invalid CPU value: invalid CPU format '{value}' "
            "(examples: 100m, 0.5, 1)"
        )
    raise ValidationError(
        f"Invalid memory value: invalid memory format '{value}' "
        "(examples: 128Mi, 1Gi, 512Ki)"
    )
