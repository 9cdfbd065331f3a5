"""Concatenation of several tensors along one dimension."""

from __future__ import annotations

from collections.abc import Sequence

from ..common import it_assert, vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..operator_utils import get_real_axis


class Concat(Operator):
    """Joins tensors that agree on every dimension but ``dim``."""

    def __init__(self, graph, inputs: Sequence, output, dim: int) -> None:
        super().__init__(OpType.CONCAT, inputs, [output])
        self._dim = get_real_axis(dim, self._inputs[0].rank)
        it_assert(self.check_valid(graph))

    @property
    def dim(self) -> int:
        """The non-negative axis the inputs are joined on."""
        return self._dim

    def infer_shape(self, inputs):
        dims = inputs[0].dims
        dims[self._dim] = sum(tensor.dims[self._dim] for tensor in inputs)
        return [dims]

    def num_inputs(self) -> int:
        return len(self._inputs)

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        shapes = "".join(vec_to_string(t.dims) + "," for t in self._inputs)
        guids = "".join(f"{t.guid}," for t in self._inputs)
        return (
            f"Concat[{self.guid}]({shapes}dim={self._dim},"
            f"input={guids}output={self._outputs[0].guid})"
        )