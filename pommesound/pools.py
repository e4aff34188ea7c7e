"""Object pools with bounded capacity."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class FixedPool(Generic[T]):
    """A pool of pre-built objects handed out and taken back by identity."""

    def __init__(self, factory: Callable[[], T], capacity: int) -> None:
        self._pool = [factory() for _ in range(capacity)]
        self._index = {id(obj): i for i, obj in enumerate(self._pool)}
        self._allocated = [False] * capacity
        self._free = list(range(capacity - 1, -1, -1))
        self.in_use = 0
        self.peak = 0

    def alloc(self) -> T:
        if not self._free:
            raise IndexError("pool exhausted")
        i = self._free.pop()
        self._allocated[i] = True
        self.in_use += 1
        self.peak = max(self.peak, self.in_use)
        return self._pool[i]

    def dispose(self, obj: T) -> None:
        i = self._index.get(id(obj))
        if i is None or self._pool[i] is not obj:
            raise ValueError("object isn't stored in pool")
        if not self._allocated[i]:
            raise ValueError("object isn't allocated")
        self._allocated[i] = False
        self.in_use -= 1
        self._free.append(i)


class GrowablePool(Generic[T]):
    """A pool addressed by integer ids that grows on demand up to a capacity."""

    def __init__(self, factory: Callable[[], T], capacity: int) -> None:
        self._factory = factory
        self._capacity = capacity
        self._pool: list[T] = []
        self._in_use_flags: list[bool] = []
        self._free: list[int] = []
        self.in_use = 0
        self.peak = 0

    def alloc(self) -> int:
        if self.is_full():
            raise IndexError("too many items allocated")
        self.in_use += 1
        self.peak = max(self.peak, self.in_use)
        if self._free:
            obj_id = self._free.pop()
            self._in_use_flags[obj_id] = True
            return obj_id
        self._pool.append(self._factory())
        self._in_use_flags.append(True)
        return len(self._pool) - 1

    def dispose(self, obj_id: int) -> None:
        if not self.is_allocated(obj_id):
            raise ValueError("id isn't allocated")
        self.in_use -= 1
        self._free.append(obj_id)
        self._in_use_flags[obj_id] = False
        self.compact()

    def compact(self) -> None:
        """Release trailing slots while the most recently freed id is the last one."""
        while self._free and self._free[-1] == len(self._pool) - 1:
            self._free.pop()
            self._pool.pop()
            self._in_use_flags.pop()

    def __getitem__(self, obj_id: int) -> T:
        if not self.is_allocated(obj_id):
            raise KeyError(obj_id)
        return self._pool[obj_id]

    def __len__(self) -> int:
        return len(self._pool)

    def is_full(self) -> bool:
        return self.in_use >= self._capacity

    def is_allocated(self, obj_id: int) -> bool:
        return 0 <= obj_id < len(self._pool) and self._in_use_flags[obj_id]