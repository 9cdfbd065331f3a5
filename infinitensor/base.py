"""Identity counters and the common base of graph objects."""

from __future__ import annotations

import itertools

_guid_counter = itertools.count(1)
_fuid_counter = itertools.count(1)


def next_guid() -> int:
    """Return a fresh globally unique id."""
    return next(_guid_counter)


def next_fuid() -> int:
    """Return a fresh family id; copies of a tensor keep theirs."""
    return next(_fuid_counter)


class GraphObject:
    """Base of tensors and operators: each instance has its own guid.

    A shallow copy gets a new guid, mirroring construction by copy.
    """

    def __init__(self) -> None:
        self._guid = next_guid()

    @property
    def guid(self) -> int:
        """The object's globally unique id."""
        return self._guid

    def print(self) -> None:
        """Write the object's text form to standard output."""
        print(str(self))

    def __copy__(self):
        cls = type(self)
        clone = cls.__new__(cls)
        clone.__dict__.update(self.__dict__)
        clone._guid = next_guid()
        return clone