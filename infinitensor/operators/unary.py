"""Single-input operators: activations, clipping and type casts."""

from __future__ import annotations

from enum import Enum

from ..common import it_assert, vec_to_string
from ..data_type import DataType
from ..op_type import OpType
from ..operator import Operator


class Unary(Operator):
    """Base of shape-preserving single-input operators."""

    def __init__(self, op_type: OpType, graph, input, output) -> None:
        super().__init__(op_type, [input], [output])
        it_assert(self.check_valid(graph))

    def infer_shape(self, inputs):
        return [inputs[0].dims]

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        source = self._inputs[0]
        return (
            f"{self._op_type}[{self.guid}]({vec_to_string(source.dims)},"
            f"input={source.guid},output={self._outputs[0].guid})"
        )


class Relu(Unary):
    """Rectified linear unit."""

    def __init__(self, graph, input, output) -> None:
        super().__init__(OpType.RELU, graph, input, output)


class Clip(Operator):
    """Limits values to ``[min_value, max_value]``; either bound may be None."""

    def __init__(self, graph, input, output, min_value=None, max_value=None) -> None:
        super().__init__(OpType.CLIP, [input], [output])
        self.min_value = min_value
        self.max_value = max_value
        it_assert(self.check_valid(graph))

    def infer_shape(self, inputs):
        return [inputs[0].dims]

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        source = self._inputs[0]
        return (
            f"{self._op_type}[{self.guid}]({vec_to_string(source.dims)},"
            f"input={source.guid},output={self._outputs[0].guid})"
        )


class CastType(Enum):
    """Source and destination type pair of a cast."""

    FLOAT2FLOAT16 = 0
    FLOAT2INT64 = 1
    FLOAT2INT32 = 2
    FLOAT2INT16 = 3
    FLOAT2INT8 = 4
    FLOAT2BFLOAT16 = 5
    INT322FLOAT = 6
    INT322INT8 = 7
    INT322INT16 = 8
    INT322INT64 = 9
    INT162FLOAT = 10
    INT162INT32 = 11
    INT82FLOAT = 12
    INT82INT16 = 13
    INT82INT32 = 14
    UINT82FLOAT = 15
    UINT82INT32 = 16
    UINT82INT64 = 17
    INT642INT32 = 18
    INT642UINT32 = 19
    INT642FLOAT = 20
    UINT322INT64 = 21
    FLOAT162FLOAT = 22
    BFLOAT162FLOAT = 23
    FLOAT2FLOAT = 24


_CAST_TARGETS = {
    CastType.FLOAT2FLOAT16: DataType.FLOAT16,
    CastType.FLOAT2INT64: DataType.INT64,
    CastType.FLOAT2INT32: DataType.INT32,
    CastType.FLOAT2INT16: DataType.INT16,
    CastType.FLOAT2INT8: DataType.INT8,
    CastType.INT322FLOAT: DataType.FLOAT32,
    CastType.INT322INT8: DataType.INT8,
    CastType.INT322INT16: DataType.INT16,
    CastType.INT162FLOAT: DataType.FLOAT32,
    CastType.INT162INT32: DataType.INT32,
    CastType.INT82FLOAT: DataType.FLOAT32,
    CastType.INT82INT16: DataType.INT16,
    CastType.INT82INT32: DataType.INT32,
    CastType.UINT82FLOAT: DataType.FLOAT32,
    CastType.UINT82INT32: DataType.INT32,
    CastType.UINT82INT64: DataType.INT64,
    CastType.INT322INT64: DataType.INT64,
    CastType.INT642INT32: DataType.INT32,
    CastType.INT642UINT32: DataType.UINT32,
    CastType.INT642FLOAT: DataType.FLOAT32,
    CastType.UINT322INT64: DataType.INT64,
    CastType.FLOAT162FLOAT: DataType.FLOAT32,
    CastType.BFLOAT162FLOAT: DataType.FLOAT32,
    CastType.FLOAT2BFLOAT16: DataType.BFLOAT16,
    CastType.FLOAT2FLOAT: DataType.FLOAT32,
}


class Cast(Operator):
    """Converts elements to another type, keeping the shape."""

    def __init__(self, graph, input, output, cast_type: CastType) -> None:
        super().__init__(OpType.CAST, [input], [output])
        self.cast_type = cast_type
        it_assert(self.check_valid(graph))

    def infer_shape(self, inputs):
        return [inputs[0].dims]

    def infer_data_type(self, inputs=None) -> list[DataType]:
        return [self.output_data_type()] * self.num_outputs()

    def output_data_type(self) -> DataType:
        """The element type the cast produces."""
        target = _CAST_TARGETS.get(self.cast_type)
        it_assert(target is not None, "Unimplemented")
        return target

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        return f"{self._op_type}[{self.guid}](output={self._outputs[0].guid})"