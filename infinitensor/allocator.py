"""Offset-based memory planner that reserves one buffer at the end."""

from __future__ import annotations

from typing import Any

from .common import it_assert

# Eight bytes: the widest element type currently supported.
_ALIGNMENT = 8


class Allocator:
    """Plans tensor placement as offsets into one shared buffer.

    ``alloc`` and ``free`` only simulate allocation; ``get_ptr`` then
    obtains a buffer of the peak size from the runtime. Once that buffer
    exists the plan is frozen.
    """

    def __init__(self, runtime: Any) -> None:
        self._runtime = runtime
        self._used = 0
        self._peak = 0
        self._alignment = _ALIGNMENT
        self._ptr: Any = None
        self._free_blocks: dict[int, int] = {}
        self._used_blocks: dict[int, int] = {}

    @property
    def used(self) -> int:
        """Bytes currently in use."""
        return self._used

    @property
    def peak(self) -> int:
        """Largest extent of the plan so far, in bytes."""
        return self._peak

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes (rounded up) and return their offset."""
        it_assert(self._ptr is None)
        size = self._aligned_size(size)
        addr = self._take_free_block(size)
        if addr is None:
            addr = self._grow(size)
        self._used_blocks[addr] = size
        self._used += size
        return addr

    def free(self, addr: int, size: int) -> None:
        """Release the block at ``addr``; unknown offsets are ignored."""
        it_assert(self._ptr is None)
        size = self._aligned_size(size)
        if addr not in self._used_blocks:
            return
        del self._used_blocks[addr]
        self._used -= size

        start, length = addr, size
        prev = max((a for a in self._free_blocks if a < start), default=None)
        if prev is not None and prev + self._free_blocks[prev] == start:
            length += self._free_blocks.pop(prev)
            start = prev
        nxt = min((a for a in self._free_blocks if a > start), default=None)
        if nxt is not None and start + length == nxt:
            length += self._free_blocks.pop(nxt)
        self._free_blocks[start] = length

    def get_ptr(self) -> Any:
        """Return the backing buffer, obtaining it from the runtime once."""
        if self._ptr is None:
            self._ptr = self._runtime.alloc(self._peak)
            print(f"Allocator really alloc: {self._peak} bytes")
        return self._ptr

    def info(self) -> str:
        """Print current and peak usage and return the printed line."""
        line = f"Used memory: {self._used}, peak memory: {self._peak}"
        print(line)
        return line

    def _aligned_size(self, size: int) -> int:
        return ((size - 1) // self._alignment + 1) * self._alignment

    def _take_free_block(self, size: int) -> int | None:
        for addr in sorted(self._free_blocks):
            block = self._free_blocks[addr]
            if block >= size:
                del self._free_blocks[addr]
                if block > size:
                    self._free_blocks[addr + size] = block - size
                return addr
        return None

    def _grow(self, size: int) -> int:
        if self._free_blocks:
            last = max(self._free_blocks)
            last_size = self._free_blocks[last]
            if last + last_size == self._peak:
                del self._free_blocks[last]
                self._peak += size - last_size
                return last
        addr = self._peak
        self._peak += size
        return addr