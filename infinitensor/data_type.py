"""Tensor element types, numbered as in the ONNX element-type list."""

from __future__ import annotations

from enum import IntEnum

from .common import InfiniError

# Storage size of a string object in the reference layout.
_STRING_OBJECT_SIZE = 32


class DataType(IntEnum):
    """Element type of a tensor.

    Each member carries its display name, the per-element storage size,
    the index of the CPU storage type and the ``struct`` format used to
    view raw memory.
    """

    def __new__(cls, index, label, size, cpu_type, fmt):
        obj = int.__new__(cls, index)
        obj._value_ = index
        obj._label = label
        obj._size = size
        obj._cpu_type = cpu_type
        obj._fmt = fmt
        return obj

    UNDEFINE = (0, "Undefine", 0, -1, None)
    FLOAT32 = (1, "Float32", 4, 0, "f")
    UINT8 = (2, "UInt8", 1, 2, "B")
    INT8 = (3, "Int8", 1, 3, "b")
    UINT16 = (4, "UInt16", 2, 4, "H")
    INT16 = (5, "Int16", 2, 5, "h")
    INT32 = (6, "Int32", 4, 6, "i")
    INT64 = (7, "Int64", 8, 7, "q")
    STRING = (8, "String", _STRING_OBJECT_SIZE, -1, None)
    BOOL = (9, "Bool", 1, 3, "b")
    FLOAT16 = (10, "Float16", 2, 4, "H")
    DOUBLE = (11, "Double", 8, 9, "d")
    UINT32 = (12, "UInt32", 4, 1, "I")
    UINT64 = (13, "UInt64", 8, 8, "Q")
    BFLOAT16 = (16, "BFloat16", 2, 4, "H")

    def size(self) -> int:
        """Bytes taken by one element."""
        return self._size

    def cpu_type(self) -> int:
        """Index of the CPU storage type, or -1 when there is none."""
        return self._cpu_type

    def struct_format(self) -> str:
        """The ``struct``/``memoryview`` format character for this type."""
        if self._fmt is None:
            raise InfiniError("Unsupported data type")
        return self._fmt

    def __str__(self) -> str:
        return self._label