"""Kernels and the registry that maps (device, operator type) to them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, NamedTuple

from .common import Device, it_assert
from .op_type import OpType
from .operator_utils import get_kernel_attrs_str


class Kernel(ABC):
    """Executes one kind of operator on one device."""

    @abstractmethod
    def compute(self, op, context: Any) -> None:
        """Run ``op`` using ``context`` as the executing runtime."""


class KernelRecord(NamedTuple):
    """A registered kernel with its name and registration number."""

    kernel: Kernel
    name: str
    id: int


def _normalize(key: tuple) -> tuple[Device, int]:
    device, code = key
    return device, int(code)


class KernelRegistry:
    """Lookup table of kernels keyed by ``(device, op type code)``."""

    _instance: "KernelRegistry | None" = None

    def __init__(self) -> None:
        self._kernels: dict[tuple[Device, int], KernelRecord] = {}
        self._count = 0

    @classmethod
    def instance(cls) -> "KernelRegistry":
        """The process-wide registry."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register_kernel(self, key: tuple, kernel: Kernel, name: str) -> bool:
        """Add ``kernel`` under ``key``; a key may be registered only once."""
        key = _normalize(key)
        it_assert(key not in self._kernels, "Kernel already registered")
        self._count += 1
        self._kernels[key] = KernelRecord(kernel, name, self._count)
        return True

    def get_kernel(self, key: tuple) -> Kernel:
        """The kernel registered under ``key``."""
        key = _normalize(key)
        record = self._kernels.get(key)
        it_assert(
            record is not None,
            "Kernel not found for key {" + get_kernel_attrs_str(key) + "}",
        )
        return record.kernel

    def get_kernel_item(self, key: tuple) -> KernelRecord:
        """The full record under ``key``; raises KeyError when absent."""
        return self._kernels[_normalize(key)]


def register_kernel(device: Device, op_type: OpType, name: str) -> Callable[[type], type]:
    """Class decorator registering an instance of the kernel class globally."""

    def decorate(cls: type) -> type:
        KernelRegistry.instance().register_kernel((device, op_type), cls(), name)
        return cls

    return decorate