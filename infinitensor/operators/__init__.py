"""Operators: element-wise arithmetic, matmul, transpose, concat, relu, clip and cast."""