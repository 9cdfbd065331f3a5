"""Tensors and the memory blobs that back them."""

from __future__ import annotations

import math
import weakref
from collections.abc import Sequence
from typing import Any

from .base import GraphObject, next_fuid
from .common import InfiniError, it_assert, vec_to_string
from .data_type import DataType

_FLOATING = {DataType.FLOAT32, DataType.DOUBLE}


class Blob:
    """A place inside a runtime buffer where a tensor's data lives."""

    def __init__(self, runtime: Any, buffer: bytearray, offset: int = 0) -> None:
        self.runtime = runtime
        self.buffer = buffer
        self.offset = offset

    def view(self, dtype: DataType, count: int) -> memoryview:
        """Return ``count`` elements of ``dtype`` starting at the offset."""
        end = self.offset + count * dtype.size()
        return memoryview(self.buffer)[self.offset:end].cast(dtype.struct_format())


def _format_element(value: object) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


class Tensor(GraphObject):
    """A typed, shaped value in a computation graph."""

    def __init__(self, shape: Sequence[int], dtype: DataType, runtime: Any) -> None:
        super().__init__()
        self._shape = list(shape)
        self._dtype = dtype
        self._runtime = runtime
        self._size = math.prod(self._shape)
        self._fuid = next_fuid()
        self._targets: list[weakref.ref] = []
        self._source: weakref.ref | None = None
        self._data: Blob | None = None

    def __copy__(self):
        clone = super().__copy__()
        clone._shape = list(self._shape)
        clone._targets = list(self._targets)
        return clone

    @property
    def size(self) -> int:
        """Number of elements."""
        return self._size

    @property
    def bytes(self) -> int:
        """Number of bytes the elements occupy."""
        return self._size * self._dtype.size()

    @property
    def dims(self) -> list[int]:
        """A copy of the shape."""
        return list(self._shape)

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        return len(self._shape)

    @property
    def fuid(self) -> int:
        """Family id, shared by copies of this tensor."""
        return self._fuid

    @property
    def dtype(self) -> DataType:
        """Element type."""
        return self._dtype

    @property
    def runtime(self) -> Any:
        """Runtime the tensor belongs to."""
        return self._runtime

    @property
    def data(self) -> Blob | None:
        """The bound blob, or None before memory is assigned."""
        return self._data

    def set_shape(self, shape: Sequence[int]) -> None:
        """Replace the shape and recompute the element count."""
        self._shape = list(shape)
        self._size = math.prod(self._shape)

    def set_data(self, generator) -> None:
        """Fill the data by calling ``generator(view, size, dtype)``."""
        it_assert(self._data is not None)
        generator(self.raw_data(), self._size, self._dtype)

    def set_data_blob(self, blob: Blob) -> None:
        """Bind the tensor to ``blob``."""
        self._data = blob

    def raw_data(self) -> memoryview:
        """A typed view over the tensor's elements."""
        it_assert(self._data is not None)
        return self._data.view(self._dtype, self._size)

    def data_to_string(self) -> str:
        """Render the elements as nested brackets, one row per line."""
        values = self.raw_data().tolist()
        shape = self._shape
        block = [1] * len(shape)
        if shape:
            block[-1] = shape[-1]
            for i in range(len(shape) - 1, 0, -1):
                block[i - 1] = block[i] * shape[i - 1]
        column = block[-1] if block else 1
        parts = [f"Tensor: {self.guid}\n"]
        last = len(values) - 1
        for i, value in enumerate(values):
            parts.extend("[" for b in block if i % b == 0)
            parts.append(_format_element(value))
            parts.extend("]" for b in block if i % b == b - 1)
            if i != last:
                parts.append(", ")
            if i % column == column - 1:
                parts.append("\n")
        return "".join(parts)

    def print_data(self) -> None:
        """Print the elements."""
        it_assert(self._data is not None)
        if not self._runtime.is_cpu():
            raise InfiniError("Unimplemented")
        print(self.data_to_string())

    def equal_data(self, other, relative_error: float = 1e-6) -> bool:
        """Compare elements with another tensor or a sequence of values.

        Integer types compare exactly; floating types within a relative
        error, or an absolute one when either side is zero.
        """
        it_assert(self._data is not None)
        if isinstance(other, Tensor):
            it_assert(other._data is not None)
            it_assert(self._dtype == other._dtype)
            it_assert(self._runtime.is_cpu())
            it_assert(other._runtime.is_cpu())
            if self._size != other._size:
                return False
            expected = other.raw_data().tolist()
        else:
            expected = list(other)
            it_assert(self._size == len(expected))
        actual = self.raw_data().tolist()
        if self._dtype not in _FLOATING:
            return all(a == b for a, b in zip(actual, expected))
        for index, (a, b) in enumerate(zip(actual, expected)):
            smaller = min(abs(a), abs(b))
            diff = abs(a - b)
            if smaller == 0.0:
                failed = diff > relative_error
            else:
                failed = diff / max(abs(a), abs(b)) > relative_error
            if failed:
                print(f"Error on {index}: {a:f} {b:f}")
                return False
        return True

    @property
    def targets(self) -> list:
        """Operators that read this tensor and are still alive."""
        return [op for op in (ref() for ref in self._targets) if op is not None]

    @property
    def source(self):
        """The operator producing this tensor, if it is still alive."""
        return self._source() if self._source is not None else None

    def add_target(self, op) -> None:
        """Record ``op`` as a reader of this tensor."""
        self._targets.append(weakref.ref(op))

    def remove_target(self, op) -> None:
        """Forget every record of ``op`` as a reader."""
        self._targets = [ref for ref in self._targets if ref() is not op]

    def set_source(self, op) -> None:
        """Record ``op`` as the producer of this tensor."""
        self._source = weakref.ref(op) if op is not None else None

    def __str__(self) -> str:
        data = f"blob@{self._data.offset}" if self._data is not None else "nullptr data"
        text = (
            f"Tensor {self.guid}, Fuid {self._fuid}, shape {vec_to_string(self._shape)}, "
            f"dtype {self._dtype}, {self._runtime}, {data}\n"
        )
        source = self.source
        text += f", source {source.guid}" if source is not None else ", source None"
        text += ", targets " + vec_to_string(op.guid for op in self.targets)
        return text