import pytest

from infinitensor.allocator import Allocator
from infinitensor.common import InfiniError

# A Float32 tensor of shape {1, 2, 2, 3}.
SMALL_BYTES = 1 * 2 * 2 * 3 * 4
# A Float32 tensor of shape {2, 2, 2, 3}.
LARGE_BYTES = 2 * 2 * 2 * 3 * 4


class _FakeRuntime:
    def __init__(self):
        self.requests = []

    def alloc(self, size):
        self.requests.append(size)
        return bytearray(size)

    def dealloc(self, buffer):
        pass


@pytest.fixture
def allocator():
    return Allocator(_FakeRuntime())


def test_alloc_reuses_freed_block(allocator):
    offset_a = allocator.alloc(SMALL_BYTES)
    offset_b = allocator.alloc(SMALL_BYTES)
    offset_c = allocator.alloc(SMALL_BYTES)
    allocator.free(offset_b, SMALL_BYTES)
    offset_d = allocator.alloc(SMALL_BYTES)
    assert offset_b == offset_d
    assert not (offset_a == 0 and offset_b == 0 and offset_c == 0 and offset_d == 0)


def test_alloc_with_end_free_block(allocator, capsys):
    allocator.alloc(SMALL_BYTES)
    allocator.alloc(SMALL_BYTES)
    offset_c = allocator.alloc(SMALL_BYTES)
    allocator.info()
    allocator.free(offset_c, SMALL_BYTES)
    offset_d = allocator.alloc(LARGE_BYTES)
    allocator.info()
    assert offset_c == offset_d
    assert allocator.peak == 2 * SMALL_BYTES + LARGE_BYTES
    assert "Used memory: " in capsys.readouterr().out


def test_get_ptr_returns_same_buffer():
    runtime = _FakeRuntime()
    allocator = Allocator(runtime)
    for _ in range(4):
        allocator.alloc(SMALL_BYTES)
    ptr1 = allocator.get_ptr()
    ptr2 = allocator.get_ptr()
    assert ptr1 is ptr2
    assert runtime.requests == [allocator.peak]
    assert len(ptr1) == allocator.peak


def test_sizes_are_aligned(allocator):
    first = allocator.alloc(1)
    second = allocator.alloc(1)
    assert second - first == 8
    assert allocator.used == 16


def test_adjacent_free_blocks_merge(allocator):
    a = allocator.alloc(SMALL_BYTES)
    b = allocator.alloc(SMALL_BYTES)
    allocator.alloc(SMALL_BYTES)
    peak = allocator.peak
    allocator.free(a, SMALL_BYTES)
    allocator.free(b, SMALL_BYTES)
    assert allocator.alloc(2 * SMALL_BYTES) == a
    assert allocator.peak == peak


def test_larger_free_block_is_split(allocator):
    a = allocator.alloc(LARGE_BYTES)
    allocator.alloc(SMALL_BYTES)
    allocator.free(a, LARGE_BYTES)
    first = allocator.alloc(SMALL_BYTES)
    second = allocator.alloc(SMALL_BYTES)
    assert (first, second) == (a, a + SMALL_BYTES)


def test_free_unknown_offset_is_ignored(allocator):
    allocator.alloc(SMALL_BYTES)
    allocator.free(1000, SMALL_BYTES)
    assert allocator.used == SMALL_BYTES


def test_used_tracks_alloc_and_free(allocator):
    a = allocator.alloc(SMALL_BYTES)
    allocator.alloc(SMALL_BYTES)
    allocator.free(a, SMALL_BYTES)
    assert allocator.used == SMALL_BYTES
    assert allocator.peak == 2 * SMALL_BYTES


def test_plan_frozen_after_get_ptr(allocator):
    offset = allocator.alloc(SMALL_BYTES)
    allocator.get_ptr()
    with pytest.raises(InfiniError):
        allocator.alloc(SMALL_BYTES)
    with pytest.raises(InfiniError):
        allocator.free(offset, SMALL_BYTES)


def test_info_output(allocator, capsys):
    allocator.alloc(SMALL_BYTES)
    allocator.info()
    out = capsys.readouterr().out
    assert out.strip() == f"Used memory: {SMALL_BYTES}, peak memory: {SMALL_BYTES}"