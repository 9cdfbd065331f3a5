import pytest

from infinitensor.common import InfiniError
from infinitensor.data_generator import IncrementalGenerator, OneGenerator
from infinitensor.data_type import DataType
from infinitensor.graph import Graph
from infinitensor.operators.concat import Concat
from infinitensor.operators.element_wise import Add, Div, Mul, Sub
from infinitensor.operators.transpose import Transpose
from infinitensor.operators.unary import Clip, Relu
from infinitensor.runtime import NativeCpuRuntime


@pytest.fixture
def runtime():
    return NativeCpuRuntime.instance()


def test_concat_native_cpu(runtime):
    g = Graph(runtime)
    t1 = g.add_tensor([2, 2, 3, 1], DataType.FLOAT32)
    t2 = g.add_tensor([2, 2, 1, 1], DataType.FLOAT32)
    t3 = g.add_tensor([2, 2, 2, 1], DataType.FLOAT32)
    op = g.add_op(Concat, [t1, t2, t3], None, 2)
    g.data_malloc()
    t1.set_data(IncrementalGenerator())
    t2.set_data(OneGenerator())
    t3.set_data(OneGenerator())
    runtime.run(g)
    assert op.output().equal_data(
        [0, 1, 2, 1, 1, 1, 3, 4, 5, 1, 1, 1,
         6, 7, 8, 1, 1, 1, 9, 10, 11, 1, 1, 1]
    )


def _run_element_wise(runtime, op_class, gen1, gen2, shape1, shape2):
    g = Graph(runtime)
    t1 = g.add_tensor(shape1, DataType.FLOAT32)
    t2 = g.add_tensor(shape2, DataType.FLOAT32)
    op = g.add_op(op_class, t1, t2, None)
    g.data_malloc()
    t1.set_data(gen1)
    t2.set_data(gen2)
    runtime.run(g)
    return op.output(), g, op


@pytest.mark.parametrize(
    "op_class, gen2, expected",
    [
        (Add, IncrementalGenerator(), [0, 1, 2, 4, 5, 6, 6, 7, 8, 10, 11, 12]),
        (Mul, IncrementalGenerator(), [0, 0, 0, 3, 4, 5, 0, 0, 0, 9, 10, 11]),
        (Sub, IncrementalGenerator(), [0, 1, 2, 2, 3, 4, 6, 7, 8, 8, 9, 10]),
        (Div, OneGenerator(), [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11]),
    ],
)
def test_element_wise_native_cpu(runtime, op_class, gen2, expected):
    output, _g, _op = _run_element_wise(
        runtime, op_class, IncrementalGenerator(), gen2, [1, 2, 2, 3, 1], [2, 1, 1]
    )
    assert output.equal_data(expected)


def test_transpose_native_cpu(runtime):
    g = Graph(runtime)
    source = g.add_tensor([1, 2, 3, 4], DataType.FLOAT32)
    op = g.add_op(Transpose, source, None, [0, 2, 1, 3])
    g.data_malloc()
    source.set_data(IncrementalGenerator())
    runtime.run(g)
    assert op.output(0).equal_data(
        [0, 1, 2, 3, 12, 13, 14, 15, 4, 5, 6, 7,
         16, 17, 18, 19, 8, 9, 10, 11, 20, 21, 22, 23]
    )


def test_add_uint32(runtime):
    g = Graph(runtime)
    t1 = g.add_tensor([3], DataType.UINT32)
    t2 = g.add_tensor([3], DataType.UINT32)
    op = g.add_op(Add, t1, t2, None)
    g.data_malloc()
    t1.set_data(IncrementalGenerator())
    t2.set_data(IncrementalGenerator())
    runtime.run(g)
    assert op.output().raw_data().tolist() == [0, 2, 4]


def test_relu(runtime):
    g = Graph(runtime)
    source = g.add_tensor([4], DataType.FLOAT32)
    op = g.add_op(Relu, source, None)
    g.data_malloc()
    view = source.raw_data()
    for index, value in enumerate([-1.5, 2.0, -3.0, 4.0]):
        view[index] = value
    runtime.run(g)
    assert op.output().raw_data().tolist() == [0.0, 2.0, 0.0, 4.0]


def test_clip(runtime):
    g = Graph(runtime)
    source = g.add_tensor([6], DataType.FLOAT32)
    op = g.add_op(Clip, source, None, 1.0, 4.0)
    g.data_malloc()
    source.set_data(IncrementalGenerator())
    runtime.run(g)
    assert op.output().raw_data().tolist() == [1.0, 1.0, 2.0, 3.0, 4.0, 4.0]


def test_clip_without_bounds_copies(runtime):
    g = Graph(runtime)
    source = g.add_tensor([5], DataType.FLOAT32)
    op = g.add_op(Clip, source, None, None, None)
    g.data_malloc()
    source.set_data(IncrementalGenerator())
    runtime.run(g)
    assert op.output().equal_data(source)


def test_transpose_twice_restores(runtime):
    g = Graph(runtime)
    source = g.add_tensor([2, 3, 4], DataType.FLOAT32)
    first = g.add_op(Transpose, source, None, [2, 0, 1])
    second = g.add_op(Transpose, first.output(), None, [1, 2, 0])
    g.data_malloc()
    source.set_data(IncrementalGenerator())
    runtime.run(g)
    assert second.output().dims == [2, 3, 4]
    assert second.output().raw_data().tolist() == list(range(24))


def test_unsupported_dtype_raises(runtime):
    g = Graph(runtime)
    t1 = g.add_tensor([2], DataType.INT32)
    t2 = g.add_tensor([2], DataType.INT32)
    g.add_op(Concat, [t1, t2], None, 0)
    g.data_malloc()
    with pytest.raises(InfiniError, match="Unimplemented"):
        runtime.run(g)