"""Shared error type, device enumeration and small formatting helpers."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class InfiniError(RuntimeError):
    """Raised when an internal check or an unsupported request fails."""


class Device(Enum):
    """Devices a runtime can execute on."""

    CPU = 1


def it_assert(condition: object, info: str = "") -> None:
    """Raise InfiniError carrying ``info`` unless ``condition`` holds."""
    if not condition:
        raise InfiniError(f"Assertion failed: {info}" if info else "Assertion failed")


def _format_value(value: object) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def vec_to_string(values: Iterable[object]) -> str:
    """Render a sequence as ``[a,b,c]``."""
    return "[" + ",".join(_format_value(value) for value in values) + "]"