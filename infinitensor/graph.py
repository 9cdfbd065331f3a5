"""Computation graph: tensors, operators, ordering, rewriting and memory."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .allocator import Allocator
from .base import GraphObject
from .common import it_assert, vec_to_string
from .data_type import DataType
from .op_type import OpType
from .operator import Operator
from .tensor import Blob, Tensor


def _is_last_two_swap(permute: Sequence[int]) -> bool:
    """True when ``permute`` keeps leading dims and swaps the last two."""
    size = len(permute)
    if size < 2:
        return False
    leading_identity = all(p == i for i, p in enumerate(permute[:-2]))
    return leading_identity and permute[-1] == size - 2 and permute[-2] == size - 1


class Graph(GraphObject):
    """Owns tensors and operators and keeps their links consistent."""

    def __init__(self, runtime: Any) -> None:
        super().__init__()
        self._runtime = runtime
        self._tensors: list[Tensor] = []
        self._ops: list[Operator] = []
        self._allocator = Allocator(runtime)
        self._sorted = False

    @property
    def runtime(self) -> Any:
        """Runtime the graph's tensors belong to."""
        return self._runtime

    @property
    def tensors(self) -> list[Tensor]:
        """The graph's tensors, in insertion order."""
        return list(self._tensors)

    @property
    def operators(self) -> list[Operator]:
        """The graph's operators, in their current order."""
        return list(self._ops)

    @property
    def inputs(self) -> list[Tensor]:
        """Tensors that no operator produces."""
        return [t for t in self._tensors if t.source is None]

    @property
    def outputs(self) -> list[Tensor]:
        """Tensors that no operator reads."""
        return [t for t in self._tensors if not t.targets]

    def add_tensor(self, shape: Sequence[int], dtype: DataType = DataType.FLOAT32) -> Tensor:
        """Create a tensor in this graph and return it."""
        tensor = Tensor(shape, dtype, self._runtime)
        self._tensors.append(tensor)
        return tensor

    def add_existing_tensor(self, tensor: Tensor) -> Tensor:
        """Add a tensor made elsewhere; it must share this graph's runtime."""
        it_assert(
            tensor.runtime is self._runtime,
            f"Tensor runtime mismatch: cannot add a tensor in {tensor.runtime} "
            f"to {self._runtime}",
        )
        self._tensors.append(tensor)
        return tensor

    def add_existing_tensors(self, tensors: Sequence[Tensor]) -> list[Tensor]:
        """Add several tensors made elsewhere."""
        for tensor in tensors:
            self.add_existing_tensor(tensor)
        return list(tensors)

    def remove_operator(self, op: Operator) -> None:
        """Drop ``op`` from the operator list if present."""
        for index, existing in enumerate(self._ops):
            if existing is op:
                del self._ops[index]
                return

    def remove_tensor(self, tensor: Tensor) -> None:
        """Drop ``tensor`` from the tensor list if present."""
        for index, existing in enumerate(self._tensors):
            if existing is tensor:
                del self._tensors[index]
                return

    def get_tensor(self, fuid: int) -> Tensor | None:
        """The first tensor with family id ``fuid``, or None."""
        return next((t for t in self._tensors if t.fuid == fuid), None)

    def add_op(self, op_class, *args, **kwargs):
        """Build an operator whose outputs are created in this graph."""
        op = op_class(self, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def add_op_with_outputs(self, op_class, *args, **kwargs):
        """Build an operator whose output tensors are given."""
        op = op_class(None, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def _add_operator_and_connect(self, op: Operator) -> None:
        self._sorted = False
        self._ops.append(op)
        for tensor in op.inputs:
            if tensor is None:
                continue
            tensor.add_target(op)
            pred = tensor.source
            if pred is not None:
                pred.add_successor(op)
                op.add_predecessor(pred)
        for tensor in op.outputs:
            if tensor is None:
                continue
            tensor.set_source(op)
            for succ in tensor.targets:
                succ.add_predecessor(op)
                op.add_successor(succ)

    def topo_sort(self) -> bool:
        """Order operators topologically; False if that is impossible."""
        if self._sorted:
            return True
        ordered: list[Operator] = []
        placed: set[Operator] = set()
        while len(ordered) < len(self._ops):
            modified = False
            for op in self._ops:
                if op in placed:
                    continue
                if all(
                    t.source is None or t.source in placed for t in op.inputs
                ):
                    modified = True
                    ordered.append(op)
                    placed.add(op)
            if not modified:
                return False
        self._ops = ordered
        self._sorted = True
        return True

    def optimize(self) -> None:
        """Remove inverse transpose pairs and fold transposes into matmuls."""
        remove_ops: list[Operator] = []
        for op in self._ops:
            if op.op_type == OpType.TRANSPOSE:
                remove_ops.extend(self._cancel_transpose_pair(op))
            elif op.op_type == OpType.MATMUL:
                remove_ops.extend(self._fold_transposes(op))

        for op in remove_ops:
            if op.outputs[0].targets:
                continue
            for tensor in op.inputs:
                tensor.remove_target(op)
            for succ in op.successors:
                succ.remove_predecessor(op)
            for pred in op.predecessors:
                pred.remove_successor(op)
            for tensor in op.outputs:
                if tensor.source is op:
                    tensor.set_source(None)
            self.remove_operator(op)
        remove_ops.clear()

        self._tensors = [
            t for t in self._tensors if t.targets or t.source is not None
        ]

    @staticmethod
    def _cancel_transpose_pair(op: Operator) -> list[Operator]:
        tensor = op.input(0)
        first = tensor.source
        if first is None or first.op_type != OpType.TRANSPOSE:
            return []
        outer, inner = op.permute, first.permute
        if len(outer) == len(inner) and not all(
            inner[p] == i for i, p in enumerate(outer)
        ):
            return []
        output = op.output(0)
        origin = first.input(0)
        for target in output.targets:
            target.replace_input(output, origin)
            origin.add_target(target)
            output.remove_target(target)
        return [op, first]

    @staticmethod
    def _fold_transposes(op: Operator) -> list[Operator]:
        removed = []
        for side in (0, 1):
            tensor = op.inputs[side]
            source = tensor.source
            if source is None or source.op_type != OpType.TRANSPOSE:
                continue
            if not _is_last_two_swap(source.permute):
                continue
            origin = source.input(0)
            op.replace_input(tensor, origin)
            removed.append(source)
            if side == 0:
                op.trans_a = not op.trans_a
            else:
                op.trans_b = not op.trans_b
            tensor.remove_target(op)
            origin.add_target(op)
        return removed

    def shape_infer(self) -> None:
        """Recompute output shapes of every operator in order."""
        for op in self._ops:
            shapes = op.infer_shape(op.inputs)
            it_assert(shapes is not None)
            old_outputs = op.outputs
            it_assert(len(shapes) == len(old_outputs))
            for new_shape, old in zip(shapes, old_outputs):
                if list(new_shape) != old.dims:
                    tensor = self.get_tensor(old.fuid)
                    it_assert(tensor is not None)
                    tensor.set_shape(new_shape)

    def data_malloc(self) -> None:
        """Plan tensor memory, reusing freed space, and bind every tensor."""
        it_assert(self.topo_sort())
        remaining = {t: len(t.targets) for t in self._tensors}
        offsets: dict[int, int] = {}
        for tensor in self._tensors:
            if tensor.source is None:
                offsets[tensor.fuid] = self._allocator.alloc(tensor.bytes)
        for op in self._ops:
            for tensor in op.outputs:
                offsets[tensor.fuid] = self._allocator.alloc(tensor.bytes)
            for tensor in op.inputs:
                if tensor in remaining:
                    remaining[tensor] -= 1
                    if remaining[tensor] == 0:
                        self._allocator.free(offsets.get(tensor.fuid, 0), tensor.bytes)
        buffer = self._allocator.get_ptr()
        for tensor in self._tensors:
            tensor.set_data_blob(Blob(self._runtime, buffer, offsets.get(tensor.fuid, 0)))
        self._allocator.info()

    def check_valid(self) -> bool:
        """Check the graph's invariants, raising InfiniError on a breach."""
        for tensor in self._tensors:
            it_assert(tensor.targets or tensor.source is not None)
            for op in tensor.targets:
                it_assert(op in self._ops)
            source = tensor.source
            it_assert(source is None or source in self._ops)
        for op in self._ops:
            for tensor in op.inputs:
                it_assert(tensor in self._tensors)
            for tensor in op.outputs:
                it_assert(tensor in self._tensors)
            for pred in op.predecessors:
                it_assert(pred in self._ops)
            for succ in op.successors:
                it_assert(succ in self._ops)
        seen: set[int] = set()
        for tensor in self._tensors:
            it_assert(tensor.fuid not in seen, str(tensor.fuid))
            seen.add(tensor.fuid)
        return True

    def __str__(self) -> str:
        lines = ["Graph Tensors:\n"]
        lines.extend(f"{tensor}\n" for tensor in self._tensors)
        lines.append("Graph operators:\n")
        for op in self._ops:
            preds = vec_to_string(o.guid for o in op.predecessors)
            succs = vec_to_string(o.guid for o in op.successors)
            lines.append(f"OP {op.guid}, pred {preds}, succ {succs}, {op}\n")
        return "".join(lines)