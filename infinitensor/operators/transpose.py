"""Permutation of tensor dimensions."""

from __future__ import annotations

from collections.abc import Sequence

from ..common import it_assert, vec_to_string
from ..op_type import OpType
from ..operator import Operator


class Transpose(Operator):
    """Reorders dimensions like ``numpy.transpose``."""

    def __init__(self, graph, input, output, permute: Sequence[int] = ()) -> None:
        super().__init__(OpType.TRANSPOSE, [input], [output])
        rank = input.rank
        if not permute:
            self._permute = list(range(rank))
        else:
            it_assert(rank == len(permute))
            self._permute = list(permute)
        it_assert(self.check_valid(graph))

    @property
    def permute(self) -> list[int]:
        """A copy of the dimension permutation."""
        return list(self._permute)

    def infer_shape(self, inputs):
        dims = inputs[0].dims
        return [[dims[p] for p in self._permute]]

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