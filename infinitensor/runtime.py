"""Runtimes: where graphs execute and where their memory comes from."""

from __future__ import annotations

from abc import ABC, abstractmethod

from . import cpu_kernels as _cpu_kernels  # noqa: F401  (registers CPU kernels)
from .common import Device
from .kernel import KernelRegistry

_WORD = 8


class Runtime(ABC):
    """A device that allocates buffers and runs graphs."""

    def __init__(self, device: Device) -> None:
        self._device = device

    @property
    def device(self) -> Device:
        """The device this runtime drives."""
        return self._device

    def is_cpu(self) -> bool:
        """Whether memory is directly addressable from the host."""
        return True

    @abstractmethod
    def run(self, graph) -> None:
        """Execute every operator of ``graph`` in order."""

    @abstractmethod
    def alloc(self, size: int) -> bytearray:
        """Return a zeroed buffer of at least ``size`` bytes."""

    @abstractmethod
    def dealloc(self, buffer: bytearray) -> None:
        """Release a buffer obtained from ``alloc``."""


class NativeCpuRuntime(Runtime):
    """Runs graphs with the reference CPU kernels."""

    _instance: "NativeCpuRuntime | None" = None

    def __init__(self) -> None:
        super().__init__(Device.CPU)

    @classmethod
    def instance(cls) -> "NativeCpuRuntime":
        """The shared CPU runtime."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def run(self, graph) -> None:
        registry = KernelRegistry.instance()
        for op in graph.operators:
            kernel = registry.get_kernel((self._device, int(op.op_type)))
            kernel.compute(op, self)

    def alloc(self, size: int) -> bytearray:
        words = (size + _WORD - 1) // _WORD
        return bytearray(words * _WORD)

    def dealloc(self, buffer: bytearray) -> None:
        buffer.clear()

    def __str__(self) -> str:
        return "CPU Runtime"