[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "infinitensor"
version = "0.1.0"
description = "A small tensor computation graph with shape inference, graph optimisation, memory planning and reference CPU kernels"
requires-python = ">=3.10"
dependencies = []
keywords = ["tensor", "graph", "operators", "shape-inference", "memory-planning", "optimisation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["infinitensor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
