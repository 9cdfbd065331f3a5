import pytest

from infinitensor.common import InfiniError
from infinitensor.data_type import DataType
from infinitensor.op_type import OpType
from infinitensor.operators.transpose import Transpose
from infinitensor.tensor import Tensor


class _TensorPool:
    def __init__(self):
        self.tensors = []

    def add_tensor(self, shape, dtype=DataType.FLOAT32):
        tensor = Tensor(shape, dtype, None)
        self.tensors.append(tensor)
        return tensor


@pytest.mark.parametrize(
    "shape, permute, expected",
    [
        ([1, 2, 3, 4], [0, 1, 2, 3], [1, 2, 3, 4]),
        ([1, 2, 3, 4], [0, 2, 1, 3], [1, 3, 2, 4]),
        ([2, 3, 4], [0, 2, 1], [2, 4, 3]),
    ],
)
def test_shape_inference(shape, permute, expected):
    g = _TensorPool()
    i = g.add_tensor(shape, DataType.FLOAT32)
    op = Transpose(g, i, None, permute)
    assert op.output().dims == expected
    assert op.permute == permute


def test_empty_permute_is_identity():
    g = _TensorPool()
    i = g.add_tensor([2, 3, 4])
    op = Transpose(g, i, None, [])
    assert op.permute == [0, 1, 2]
    assert op.output().dims == [2, 3, 4]


def test_permute_rank_mismatch_raises():
    g = _TensorPool()
    i = g.add_tensor([2, 3, 4])
    with pytest.raises(InfiniError):
        Transpose(g, i, None, [1, 0])


def test_permute_property_is_a_copy():
    g = _TensorPool()
    i = g.add_tensor([2, 3])
    op = Transpose(g, i, None, [1, 0])
    perm = op.permute
    perm[0] = 0
    assert op.permute == [1, 0]


def test_given_output_checked():
    g = _TensorPool()
    i = g.add_tensor([2, 3])
    good = g.add_tensor([3, 2])
    bad = g.add_tensor([2, 3])
    op = Transpose(None, i, good, [1, 0])
    assert op.output() is good
    with pytest.raises(InfiniError):
        Transpose(None, i, bad, [1, 0])


def test_str_and_type():
    g = _TensorPool()
    i = g.add_tensor([2, 3])
    op = Transpose(g, i, None, [1, 0])
    assert op.op_type == OpType.TRANSPOSE
    assert op.num_inputs() == 1
    assert str(op) == (
        f"Transpose[{op.guid}]([2,3],input={i.guid},output={op.output().guid})"
    )