"""Batched matrix multiplication with optional transposition."""

from __future__ import annotations

from ..common import it_assert
from ..op_type import OpType
from ..operator import Operator


class Matmul(Operator):
    """Multiplies the last two dimensions, broadcasting leading ones.

    ``trans_a``/``trans_b`` swap the last two dimensions of an input
    before multiplying; leading dimensions are unaffected.
    """

    def __init__(self, graph, a, b, c, trans_a: bool = False, trans_b: bool = False) -> None:
        super().__init__(OpType.MATMUL, [a, b], [c])
        self.trans_a = trans_a
        self.trans_b = trans_b
        self._m = 0
        self._n = 0
        self._k = 0
        it_assert(self.check_valid(graph))

    @property
    def m(self) -> int:
        """Rows of the result matrix."""
        return self._m

    @property
    def n(self) -> int:
        """Columns of the result matrix."""
        return self._n

    @property
    def k(self) -> int:
        """Length of the reduced dimension."""
        return self._k

    def infer_shape(self, inputs):
        a_shape = inputs[0].dims
        b_shape = inputs[1].dims
        m, k_a = a_shape[-2], a_shape[-1]
        if self.trans_a:
            m, k_a = k_a, m
        k_b, n = b_shape[-2], b_shape[-1]
        if self.trans_b:
            k_b, n = n, k_b
        if k_a != k_b:
            return None

        batch_rank = max(len(a_shape), len(b_shape)) - 2
        a_batch = [1] * (batch_rank - (len(a_shape) - 2)) + a_shape[:-2]
        b_batch = [1] * (batch_rank - (len(b_shape) - 2)) + b_shape[:-2]
        shape = []
        for da, db in zip(a_batch, b_batch):
            if da == 1 or da == db:
                shape.append(db)
            elif db == 1:
                shape.append(da)
            else:
                return None
        shape.extend((m, n))
        self._m, self._n, self._k = m, n, k_a
        return [shape]

    def num_inputs(self) -> int:
        return len(self._inputs)

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a_name = "A^T" if self.trans_a else "A"
        b_name = "B^T" if self.trans_b else "B]"
        return (
            f"Matmul([{a_name},{b_name},A={self._inputs[0].guid},"
            f"B={self._inputs[1].guid},C={self._outputs[0].guid},"
            f"mnk=[{self._m},{self._n},{self._k}])"
        )