"""Shape and index helpers shared by operators and kernels."""

from __future__ import annotations

from collections.abc import Sequence

from .common import Device, InfiniError, it_assert
from .op_type import OpType


def infer_broadcast(a: Sequence[int], b: Sequence[int]) -> list[int]:
    """Broadcast two shapes; an empty list means they are incompatible."""
    rank = max(len(a), len(b))
    padded_a = [1] * (rank - len(a)) + list(a)
    padded_b = [1] * (rank - len(b)) + list(b)
    shape = []
    for da, db in zip(padded_a, padded_b):
        if da == db or db == 1:
            shape.append(da)
        elif da == 1:
            shape.append(db)
        else:
            return []
    return shape


def get_real_axis(axis: int, rank: int) -> int:
    """Turn a possibly negative axis into an index in ``range(rank)``."""
    it_assert(rank >= 1)
    it_assert(-rank <= axis <= rank - 1)
    return axis + rank if axis < 0 else axis


def locate_index(index: int, shape: Sequence[int]) -> list[int]:
    """Convert a flat row-major index into per-dimension coordinates."""
    coords = []
    for extent in reversed(shape):
        index, rem = divmod(index, extent)
        coords.append(rem)
    coords.reverse()
    return coords


def delocate_index(
    shape_index: Sequence[int], shape: Sequence[int], stride: Sequence[int]
) -> int:
    """Flatten coordinates into ``shape``, wrapping broadcast dimensions."""
    it_assert(len(shape_index) == len(shape))
    it_assert(len(shape) == len(stride))
    return sum((i % extent) * step for i, extent, step in zip(shape_index, shape, stride))


def device_to_str(device: Device) -> str:
    """Name of a device."""
    if device is Device.CPU:
        return "CPU"
    raise InfiniError("Unimplemented")


def get_kernel_attrs_str(kernel_attrs: tuple) -> str:
    """Render a ``(device, op type)`` kernel key."""
    device, code = kernel_attrs
    try:
        op_name = str(OpType(code))
    except ValueError:
        op_name = "Unknown"
    return f"{device_to_str(device)}, {op_name}"