"""Binary element-wise operators with broadcasting."""

from __future__ import annotations

from ..common import it_assert, vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..operator_utils import infer_broadcast


class ElementWise(Operator):
    """Base of binary element-wise operators."""

    def __init__(self, op_type: OpType, graph, input0, input1, output) -> None:
        super().__init__(op_type, [input0, input1], [output])
        it_assert(self.check_valid(graph))

    def infer_shape(self, inputs):
        return [infer_broadcast(inputs[0].dims, inputs[1].dims)]

    def num_inputs(self) -> int:
        return 2

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a, b = self._inputs[0], self._inputs[1]
        return (
            f"{self._op_type}[{self.guid}]("
            f"{vec_to_string(a.dims)},{vec_to_string(b.dims)},"
            f"input0={a.guid},input1={b.guid},output={self._outputs[0].guid})"
        )


class Add(ElementWise):
    """Element-wise sum."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.ADD, graph, input0, input1, output)


class Sub(ElementWise):
    """Element-wise difference."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.SUB, graph, input0, input1, output)


class Mul(ElementWise):
    """Element-wise product."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.MUL, graph, input0, input1, output)


class Div(ElementWise):
    """Element-wise quotient."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.DIV, graph, input0, input1, output)