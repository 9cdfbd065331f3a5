"""Base class of graph operators."""

from __future__ import annotations

import copy
import weakref
from abc import ABC, abstractmethod
from collections.abc import Sequence

from .base import GraphObject
from .common import it_assert
from .data_type import DataType
from .op_type import OpType


def _alive(refs: list[weakref.ref]) -> list:
    return [op for op in (ref() for ref in refs) if op is not None]


class Operator(GraphObject, ABC):
    """An operation reading input tensors and producing output tensors.

    Output slots may be None until ``check_valid`` creates them in a graph.
    Neighbouring operators are held weakly.
    """

    def __init__(self, op_type: OpType, inputs: Sequence, outputs: Sequence) -> None:
        super().__init__()
        self._op_type = op_type
        self._inputs = list(inputs)
        self._outputs = list(outputs)
        self._predecessors: list[weakref.ref] = []
        self._successors: list[weakref.ref] = []

    @abstractmethod
    def infer_shape(self, inputs):
        """Return the output shapes for ``inputs``, or None on failure."""

    @abstractmethod
    def num_inputs(self) -> int:
        """Number of inputs."""

    @abstractmethod
    def num_outputs(self) -> int:
        """Number of outputs."""

    def infer_data_type(self, inputs=None) -> list[DataType]:
        """Output types: by default every output takes the first input's type."""
        inputs = self._inputs if inputs is None else inputs
        return [inputs[0].dtype] * self.num_outputs()

    def check_valid(self, graph) -> bool:
        """Check shapes; with a graph, create the outputs in it."""
        shapes = self.infer_shape(self._inputs)
        if shapes is None:
            return False
        if len(shapes) != len(self._outputs):
            return False
        if graph is not None:
            dtypes = self.infer_data_type()
            for i, (shape, dtype) in enumerate(zip(shapes, dtypes)):
                it_assert(
                    self._outputs[i] is None, "Find empty output while operator creation"
                )
                self._outputs[i] = graph.add_tensor(shape, dtype)
            return True
        return all(
            list(shape) == output.dims for shape, output in zip(shapes, self._outputs)
        )

    @property
    def inputs(self) -> list:
        """The input tensors."""
        return list(self._inputs)

    @property
    def outputs(self) -> list:
        """The output tensors."""
        return list(self._outputs)

    def input(self, index: int):
        """The input tensor at ``index``."""
        return self._inputs[index]

    def output(self, index: int | None = None):
        """The output at ``index``, or the only output when none is given."""
        if index is None:
            it_assert(len(self._outputs) == 1, "Unimplemented")
            return self._outputs[0]
        it_assert(0 <= index < len(self._outputs), "Index exceeded")
        return self._outputs[index]

    @property
    def predecessors(self) -> list:
        """Live operators producing this operator's inputs."""
        return _alive(self._predecessors)

    @property
    def successors(self) -> list:
        """Live operators consuming this operator's outputs."""
        return _alive(self._successors)

    @property
    def op_type(self) -> OpType:
        """Kind of the operator."""
        return self._op_type

    @property
    def dtype(self) -> DataType:
        """Type of the first input."""
        return self.input(0).dtype

    @property
    def out_dtype(self) -> DataType:
        """Type of the single output."""
        return self.output().dtype

    def clone(self, new_inputs: Sequence, new_outputs: Sequence) -> "Operator":
        """Copy this operator onto other tensors, without graph links."""
        op = copy.copy(self)
        op._inputs = list(new_inputs)
        op._outputs = list(new_outputs)
        op._predecessors = []
        op._successors = []
        it_assert(op.check_valid(None))
        return op

    def add_predecessor(self, op: "Operator") -> None:
        """Record ``op`` as a predecessor."""
        self._predecessors.append(weakref.ref(op))

    def add_successor(self, op: "Operator") -> None:
        """Record ``op`` as a successor."""
        self._successors.append(weakref.ref(op))

    def remove_predecessor(self, op: "Operator") -> None:
        """Forget every record of ``op`` as a predecessor."""
        self._predecessors = [ref for ref in self._predecessors if ref() is not op]

    def remove_successor(self, op: "Operator") -> None:
        """Forget every record of ``op`` as a successor."""
        self._successors = [ref for ref in self._successors if ref() is not op]

    def replace_input(self, old, new) -> None:
        """Replace every occurrence of tensor ``old`` among the inputs."""
        self._inputs = [new if tensor is old else tensor for tensor in self._inputs]