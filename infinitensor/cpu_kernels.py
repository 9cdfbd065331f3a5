"""Reference CPU kernels for the supported operators."""

from __future__ import annotations

import math
import operator as _op
from typing import Any, Callable

from .common import Device, InfiniError
from .data_type import DataType
from .kernel import Kernel, register_kernel
from .op_type import OpType
from .operator_utils import delocate_index, locate_index

_FLT_MAX = 3.4028234663852886e38
_UINT32_MASK = 0xFFFFFFFF


def _as_float32(value: float) -> float:
    value = float(value)
    if math.isfinite(value) and abs(value) > _FLT_MAX:
        return math.copysign(math.inf, value)
    return value


def _as_uint32(value: float) -> int:
    return int(value) & _UINT32_MASK


def _element_cast(dtype: DataType) -> Callable[[Any], Any]:
    if dtype is DataType.FLOAT32:
        return _as_float32
    if dtype is DataType.UINT32:
        return _as_uint32
    raise InfiniError("Unimplemented")


def _float_div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _binary_function(op_type: OpType, dtype: DataType) -> Callable[[Any, Any], Any]:
    if op_type == OpType.ADD:
        return _op.add
    if op_type == OpType.SUB:
        return _op.sub
    if op_type == OpType.MUL:
        return _op.mul
    if op_type == OpType.DIV:
        return _float_div if dtype is DataType.FLOAT32 else _op.floordiv
    raise InfiniError("Unimplemented")


def _strides(shape: list[int]) -> list[int]:
    strides = [0] * len(shape)
    step = 1
    for i in range(len(shape) - 1, -1, -1):
        strides[i] = step
        step *= shape[i]
    return strides


@register_kernel(Device.CPU, OpType.CONCAT, "ConcatNaive_CPU")
class NaiveConcat(Kernel):
    """Copies each input into its slice of the output."""

    def compute(self, op, context: Any) -> None:
        _element_cast(op.dtype)
        dim = op.dim
        output = op.output()
        out_dims = output.dims
        block_inner = math.prod(out_dims[dim + 1:])
        block_offset = out_dims[dim] * block_inner
        out = output.raw_data()
        dim_offset = 0
        for tensor in op.inputs:
            in_dims = tensor.dims
            local_block = math.prod(in_dims[dim:])
            inner_offset = block_inner * dim_offset
            values = tensor.raw_data()
            for i_offset, value in enumerate(values):
                o_offset = (
                    i_offset % local_block
                    + inner_offset
                    + i_offset // local_block * block_offset
                )
                out[o_offset] = value
            dim_offset += in_dims[dim]


@register_kernel(Device.CPU, OpType.ADD, "addNaive_CPU")
@register_kernel(Device.CPU, OpType.SUB, "subNaive_CPU")
@register_kernel(Device.CPU, OpType.MUL, "mulNaive_CPU")
@register_kernel(Device.CPU, OpType.DIV, "divNaive_CPU")
class NativeElementWise(Kernel):
    """Binary arithmetic with broadcasting."""

    def compute(self, op, context: Any) -> None:
        dtype = op.dtype
        cast = _element_cast(dtype)
        fn = _binary_function(op.op_type, dtype)
        input0, input1 = op.input(0), op.input(1)
        output = op.output()
        out_dims = output.dims
        rank = output.rank
        a = [1] * (rank - input0.rank) + input0.dims
        b = [1] * (rank - input1.rank) + input1.dims
        stride_a, stride_b = _strides(a), _strides(b)
        in0, in1, out = input0.raw_data(), input1.raw_data(), output.raw_data()
        for i in range(output.size):
            coords = locate_index(i, out_dims)
            value0 = in0[delocate_index(coords, a, stride_a)]
            value1 = in1[delocate_index(coords, b, stride_b)]
            out[i] = cast(fn(value0, value1))


@register_kernel(Device.CPU, OpType.TRANSPOSE, "TransposeNaive_CPU")
class NaiveTranspose(Kernel):
    """Moves every element to its permuted position."""

    def compute(self, op, context: Any) -> None:
        _element_cast(op.dtype)
        source = op.input(0)
        in_dims = source.dims
        perm = op.permute
        values = source.raw_data()
        out = op.output().raw_data()
        for in_idx, value in enumerate(values):
            pos = locate_index(in_idx, in_dims)
            out_idx = 0
            for p in perm:
                out_idx = out_idx * in_dims[p] + pos[p]
            out[out_idx] = value


@register_kernel(Device.CPU, OpType.RELU, "reluNaive_CPU")
class NativeUnary(Kernel):
    """Element-wise activations."""

    def compute(self, op, context: Any) -> None:
        cast = _element_cast(op.dtype)
        if op.op_type != OpType.RELU:
            raise InfiniError("Unimplemented")
        values = op.input(0).raw_data()
        out = op.output().raw_data()
        for offset in range(op.output().size):
            out[offset] = cast(max(0, values[offset]))


@register_kernel(Device.CPU, OpType.CLIP, "Clip_CPU")
class ClipKernel(Kernel):
    """Limits each element to the operator's optional bounds."""

    def compute(self, op, context: Any) -> None:
        cast = _element_cast(op.dtype)
        low, high = op.min_value, op.max_value
        values = op.input(0).raw_data()
        out = op.output().raw_data()
        for offset in range(op.output().size):
            value = values[offset]
            if low is not None and value < low:
                value = low
            elif high is not None and value > high:
                value = high
            out[offset] = cast(value)