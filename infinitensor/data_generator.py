"""Callables that fill tensor storage with generated values."""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence

from .common import InfiniError
from .data_type import DataType

_CONVERTERS = {DataType.UINT32: int, DataType.FLOAT32: float}


class DataGenerator:
    """Fills the first ``size`` elements of ``data`` for UInt32 or Float32."""

    def __call__(self, data: MutableSequence, size: int, dtype: DataType) -> None:
        convert = _CONVERTERS.get(dtype)
        if convert is None:
            raise InfiniError("Unimplemented")
        for index, value in enumerate(self._values(size)):
            data[index] = convert(value)

    def _values(self, size: int) -> Iterable[float]:
        raise InfiniError("Unimplemented")


class IncrementalGenerator(DataGenerator):
    """Writes 0, 1, 2, ... in element order."""

    def _values(self, size: int) -> Iterable[float]:
        return range(size)


class ValGenerator(DataGenerator):
    """Writes one constant value to every element."""

    def __init__(self, value: float) -> None:
        self.value = value

    def _values(self, size: int) -> Iterable[float]:
        return (self.value for _ in range(size))


class OneGenerator(ValGenerator):
    """Writes ones."""

    def __init__(self) -> None:
        super().__init__(1)


class ZeroGenerator(ValGenerator):
    """Writes zeros."""

    def __init__(self) -> None:
        super().__init__(0)