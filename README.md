# infinitensor

A small tensor computation graph in pure Python. You build a graph of tensors
and operators; the package infers output shapes and element types, removes
redundant transposes, plans memory for every tensor in one shared buffer, and
runs the graph with reference CPU kernels.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Building a graph

```python
from infinitensor.data_type import DataType
from infinitensor.data_generator import IncrementalGenerator, OneGenerator
from infinitensor.graph import Graph
from infinitensor.operators.concat import Concat
from infinitensor.runtime import NativeCpuRuntime

runtime = NativeCpuRuntime.instance()
g = Graph(runtime)

t1 = g.add_tensor([2, 2, 3, 1], DataType.FLOAT32)
t2 = g.add_tensor([2, 2, 1, 1], DataType.FLOAT32)
op = g.add_op(Concat, [t1, t2], None, 2)

print(op.output().dims)       # [2, 2, 4, 1]

g.data_malloc()               # plan and bind memory for every tensor
t1.set_data(IncrementalGenerator())
t2.set_data(OneGenerator())
runtime.run(g)

op.output().print_data()
print(op.output().equal_data([0, 1, 2, 1, 3, 4, 5, 1,
                              6, 7, 8, 1, 9, 10, 11, 1]))   # True
```

- `Graph.add_op(op_class, *args)` builds the operator and creates its output
  tensors in the graph; pass `None` in each output position.
- `Graph.add_op_with_outputs(op_class, *args)` connects output tensors that
  already exist.
- `Graph.add_tensor(shape, dtype)` defaults to `DataType.FLOAT32`.
- `Graph.inputs` and `Graph.outputs` list tensors with no producer and no
  consumer; `Graph.check_valid()` raises `InfiniError` when the graph's links
  are inconsistent.
- `Graph.shape_infer()` recomputes output shapes after input shapes change.

Failed checks throughout the package raise `infinitensor.common.InfiniError`.

## Operators

| Module | Classes |
| --- | --- |
| `infinitensor.operators.element_wise` | `Add`, `Sub`, `Mul`, `Div` (broadcasting) |
| `infinitensor.operators.matmul` | `Matmul` with batch broadcasting and `trans_a` / `trans_b` |
| `infinitensor.operators.transpose` | `Transpose` with a dimension permutation |
| `infinitensor.operators.concat` | `Concat` along any axis, negative axes included |
| `infinitensor.operators.unary` | `Relu`, `Clip`, `Cast` (with `CastType`) |

Element types are the members of `infinitensor.data_type.DataType`
(`FLOAT32`, `UINT32`, `INT64`, `FLOAT16`, and so on), numbered as in the ONNX
element-type list. `Cast` sets its output type from its `CastType`.

## Graph optimisation

`Graph.optimize()` applies two rules:

1. Two adjacent `Transpose` operators whose permutations cancel out are
   removed, and their consumers read the original tensor.
2. A `Transpose` that swaps only the last two axes and feeds a `Matmul` is
   folded into the `Matmul`'s `trans_a` or `trans_b` flag.

Tensors left with neither a producer nor a consumer are then dropped.

## Memory planning

`Graph.data_malloc()` sorts the operators topologically and gives every tensor
an offset from an `infinitensor.allocator.Allocator`. The allocator rounds
sizes up to 8 bytes, reuses freed blocks first-fit, merges adjacent free
blocks, and grows into a free block that ends the arena. A tensor is released
after its last consumer. The runtime then supplies one zeroed buffer of the
peak size, shared by all tensors, and the plan is frozen. Both the final
allocation and the usage summary are printed.

## Kernels

Importing `infinitensor.runtime` registers the CPU kernels in
`infinitensor.kernel.KernelRegistry`. Further kernels can be added with the
`infinitensor.kernel.register_kernel(device, op_type, name)` class decorator;
each `(device, op type)` pair may be registered only once.

## Limitations

- CPU kernels exist for `Add`, `Sub`, `Mul`, `Div`, `Transpose`, `Concat`,
  `Relu` and `Clip`, and only for `FLOAT32` and `UINT32` tensors. `Matmul` and
  `Cast` have shape and type inference but no kernel, so running a graph that
  contains them raises `InfiniError`.
- `NativeCpuRuntime` is the only runtime; there is no model import or export
  and no command-line tool.