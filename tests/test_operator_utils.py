import math

import pytest

from infinitensor.common import Device, InfiniError
from infinitensor.op_type import OpType
from infinitensor.operator_utils import (
    delocate_index,
    device_to_str,
    get_kernel_attrs_str,
    get_real_axis,
    infer_broadcast,
    locate_index,
)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ([2, 3, 3, 4], [2, 3, 3, 4], [2, 3, 3, 4]),
        ([2, 3, 4, 5], [], [2, 3, 4, 5]),
        ([2, 3, 4, 5], [5], [2, 3, 4, 5]),
        ([4, 5], [2, 3, 4, 5], [2, 3, 4, 5]),
        ([1, 4, 5], [2, 3, 1, 1], [2, 3, 4, 5]),
        ([3, 4, 5], [2, 1, 1, 1], [2, 3, 4, 5]),
    ],
)
def test_infer_broadcast(a, b, expected):
    assert infer_broadcast(a, b) == expected


def test_infer_broadcast_incompatible_is_empty():
    assert infer_broadcast([3, 4], [5, 4]) == []


def test_infer_broadcast_is_symmetric():
    assert infer_broadcast([1, 4, 5], [2, 3, 1, 1]) == infer_broadcast(
        [2, 3, 1, 1], [1, 4, 5]
    )


def test_get_real_axis():
    assert get_real_axis(-1, 4) == 3
    assert get_real_axis(2, 4) == 2
    assert get_real_axis(-4, 4) == 0


@pytest.mark.parametrize("axis, rank", [(4, 4), (-5, 4), (0, 0)])
def test_get_real_axis_rejects_out_of_range(axis, rank):
    with pytest.raises(InfiniError):
        get_real_axis(axis, rank)


def test_locate_delocate_round_trip():
    shape = [2, 3, 4]
    stride = [12, 4, 1]
    for flat in range(math.prod(shape)):
        coords = locate_index(flat, shape)
        assert all(0 <= c < extent for c, extent in zip(coords, shape))
        assert delocate_index(coords, shape, stride) == flat


def test_delocate_wraps_broadcast_dimension():
    assert delocate_index([1, 2], [1, 3], [3, 1]) == delocate_index([0, 2], [1, 3], [3, 1])


def test_delocate_rank_mismatch_raises():
    with pytest.raises(InfiniError):
        delocate_index([0, 1], [2], [1])


def test_device_to_str():
    assert device_to_str(Device.CPU) == "CPU"


def test_get_kernel_attrs_str():
    assert get_kernel_attrs_str((Device.CPU, OpType.ADD)) == "CPU, Add"
    assert get_kernel_attrs_str((Device.CPU, int(OpType.MATMUL))) == "CPU, MatMul"
    assert get_kernel_attrs_str((Device.CPU, 999)) == "CPU, Unknown"