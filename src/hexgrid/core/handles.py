"""Generational keyed collections for the metadata tables.

Regions, perspectives, views and layouts refer to each other only through
keys into a `KeyMap`. A key stays valid until its own entry is removed; a
slot that gets reused receives a new version, so an old key never resolves
to the new occupant.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

_TOKEN_RE = re.compile(r"^(\d+)v(\d+)$")


class StaleHandle(KeyError):
    """Raised when a key is null, removed, or belongs to another table."""

    def __init__(self, key: Key) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"{type(self.key).__name__} {self.key.token()} not found"


@dataclass(frozen=True, order=True)
class Key:
    index: int
    version: int

    @classmethod
    def null(cls):
        return cls(-1, 0)

    def is_null(self) -> bool:
        return self.index < 0 or self.version <= 0

    def token(self) -> str:
        if self.is_null():
            return "null"
        return f"{self.index}v{self.version}"

    @classmethod
    def parse(cls, text: str):
        """Parse a token produced by `token()`. Raises ValueError on garbage."""
        text = str(text).strip()
        if text == "null":
            return cls.null()
        m = _TOKEN_RE.match(text)
        if m is None:
            raise ValueError(f"invalid key token {text!r}")
        index, version = int(m.group(1)), int(m.group(2))
        if version <= 0:
            raise ValueError(f"invalid key version in {text!r}")
        return cls(index, version)


class RegionKey(Key):
    pass


class PerspectiveKey(Key):
    pass


class ViewKey(Key):
    pass


class LayoutKey(Key):
    pass


K = TypeVar("K", bound=Key)
V = TypeVar("V")


@dataclass
class _Slot(Generic[V]):
    version: int
    value: V | None = None
    occupied: bool = False


class KeyMap(Generic[K, V]):
    """Slot map keyed by typed, versioned keys."""

    def __init__(self, key_type: type[K]) -> None:
        self._key_type = key_type
        self._slots: list[_Slot[V]] = []
        self._free: list[int] = []
        self._len = 0

    @property
    def key_type(self) -> type[K]:
        return self._key_type

    def _slot_for(self, key: K) -> _Slot[V] | None:
        if type(key) is not self._key_type or key.is_null():
            return None
        if key.index >= len(self._slots):
            return None
        slot = self._slots[key.index]
        if not slot.occupied or slot.version != key.version:
            return None
        return slot

    def insert(self, value: V) -> K:
        if self._free:
            index = self._free.pop()
            slot = self._slots[index]
            slot.version += 1
        else:
            index = len(self._slots)
            slot = _Slot(version=1)
            self._slots.append(slot)
        slot.value = value
        slot.occupied = True
        self._len += 1
        return self._key_type(index, slot.version)

    def insert_at(self, key: K, value: V) -> None:
        """Place `value` under an exact key (used when restoring a document)."""
        if type(key) is not self._key_type or key.is_null():
            raise ValueError(f"cannot insert under {key!r}")
        while len(self._slots) <= key.index:
            self._free.append(len(self._slots))
            self._slots.append(_Slot(version=0))
        slot = self._slots[key.index]
        if slot.occupied:
            raise ValueError(f"slot for {key.token()} already occupied")
        self._free = [i for i in self._free if i != key.index]
        slot.version = key.version
        slot.value = value
        slot.occupied = True
        self._len += 1

    def get(self, key: K) -> V | None:
        slot = self._slot_for(key)
        return slot.value if slot is not None else None

    def __getitem__(self, key: K) -> V:
        slot = self._slot_for(key)
        if slot is None:
            raise StaleHandle(key)
        return slot.value  # type: ignore[return-value]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, Key) and self._slot_for(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[K]:
        return self.keys()

    def remove(self, key: K) -> V | None:
        slot = self._slot_for(key)
        if slot is None:
            return None
        value = slot.value
        slot.value = None
        slot.occupied = False
        self._free.append(key.index)
        self._len -= 1
        return value

    def clear(self) -> None:
        for key in list(self.keys()):
            self.remove(key)

    def keys(self) -> Iterator[K]:
        for index, slot in enumerate(self._slots):
            if slot.occupied:
                yield self._key_type(index, slot.version)

    def values(self) -> Iterator[V]:
        for slot in self._slots:
            if slot.occupied:
                yield slot.value  # type: ignore[misc]

    def items(self) -> Iterator[tuple[K, V]]:
        for index, slot in enumerate(self._slots):
            if slot.occupied:
                yield self._key_type(index, slot.version), slot.value  # type: ignore[misc]
