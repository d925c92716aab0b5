"""
Database kernel for musicdb.

The kernel is the smallest set of operations over an ordered collection of
songs. Everything else (search, sort, split, file I/O) lives in
`musicdb.core.secondary` and is written against `MusicDatabaseKernel` only.

Design decisions:
- Storage is a pluggable "kind" (list-backed or dict-backed) looked up by name
  in a registry, so `new_instance()` can rebuild the same kind without knowing
  the concrete class
- Positions are 0-based and contiguous; removal compacts
- Iteration goes through `SongCursor`, which can remove the entry it just
  yielded and refuses to continue if the database was changed behind its back
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Protocol, Self, runtime_checkable

from musicdb.core import PreconditionViolation, UnknownKindError
from musicdb.core.song import Song

logger = logging.getLogger(__name__)

DEFAULT_KIND = "array"


class SongStorage(Protocol):
    """Positional container used by `KernelDatabase`."""

    def append(self, song: Song) -> None: ...

    def pop(self, index: int) -> Song: ...

    def get(self, index: int) -> Song: ...

    def clear(self) -> None: ...

    def reserve(self, capacity: int) -> None: ...

    def __len__(self) -> int: ...


_KINDS: dict[str, Callable[[], SongStorage]] = {}


def register_kind(name: str) -> Callable[[type], type]:
    """
    Class decorator registering a storage implementation under `name`.

    The class must be constructible without arguments.
    """

    def decorator(cls: type) -> type:
        if name in _KINDS:
            raise ValueError(f"storage kind {name!r} is already registered")
        _KINDS[name] = cls
        return cls

    return decorator


def available_kinds() -> tuple[str, ...]:
    """Return the registered storage kind names, in registration order."""
    return tuple(_KINDS)


def create_storage(kind: str) -> SongStorage:
    """
    Create an empty storage of the given kind.

    Raises:
        UnknownKindError: If no storage is registered under `kind`.
    """
    try:
        factory = _KINDS[kind]
    except KeyError:
        raise UnknownKindError(
            f"unknown storage kind {kind!r} (known: {', '.join(_KINDS)})"
        ) from None
    return factory()


@register_kind("array")
class ArrayStorage:
    """Songs kept in a Python list."""

    def __init__(self) -> None:
        self._songs: list[Song] = []
        self.capacity = 0

    def append(self, song: Song) -> None:
        self._songs.append(song)

    def pop(self, index: int) -> Song:
        return self._songs.pop(index)

    def get(self, index: int) -> Song:
        return self._songs[index]

    def clear(self) -> None:
        self._songs.clear()

    def reserve(self, capacity: int) -> None:
        # Lists grow on their own; the hint is only remembered.
        self.capacity = max(self.capacity, capacity)

    def __len__(self) -> int:
        return len(self._songs)


@register_kind("hash")
class HashStorage:
    """
    Songs kept in a dict keyed by position.

    Removal shifts every later key down by one so positions stay contiguous.
    """

    def __init__(self) -> None:
        self._songs: dict[int, Song] = {}
        self.capacity = 0

    def append(self, song: Song) -> None:
        self._songs[len(self._songs)] = song

    def pop(self, index: int) -> Song:
        last = len(self._songs) - 1
        song = self._songs[index]
        for i in range(index, last):
            self._songs[i] = self._songs[i + 1]
        del self._songs[last]
        return song

    def get(self, index: int) -> Song:
        return self._songs[index]

    def clear(self) -> None:
        self._songs.clear()

    def reserve(self, capacity: int) -> None:
        self.capacity = max(self.capacity, capacity)

    def __len__(self) -> int:
        return len(self._songs)


@runtime_checkable
class MusicDatabaseKernel(Protocol):
    """
    Primitive operations every music database provides.

    Secondary operations must be expressible with these alone.
    """

    @property
    def kind(self) -> str: ...

    def new_instance(self) -> Self: ...

    def clear(self) -> None: ...

    def transfer_from(self, source: Self) -> None: ...

    def add_entry(self, song: Song) -> None: ...

    def remove_entry_by_order(self, index: int) -> Song: ...

    def get_entry_by_order(self, index: int) -> Song: ...

    def size(self) -> int: ...

    def ensure_capacity(self, capacity: int) -> None: ...

    def __iter__(self) -> Iterator[Song]: ...


class KernelDatabase:
    """
    Ordered collection of songs backed by a storage kind.

    Duplicates are allowed at this level; de-duplication is a secondary
    concern (see `musicdb.core.secondary.append`).
    """

    def __init__(self, capacity: int | None = None, *, kind: str = DEFAULT_KIND) -> None:
        self._kind = kind
        self._storage = create_storage(kind)
        # Bumped on every mutation so live cursors can detect foreign changes.
        self._revision = 0
        if capacity is not None:
            self.ensure_capacity(capacity)

    @property
    def kind(self) -> str:
        """Name of the storage kind backing this database."""
        return self._kind

    def new_instance(self) -> Self:
        """Return an empty database of the same class and kind."""
        return type(self)(kind=self._kind)

    def clear(self) -> None:
        """Remove all entries."""
        self._storage.clear()
        self._revision += 1

    def transfer_from(self, source: Self) -> None:
        """
        Move every entry of `source` into this database.

        This database is cleared first; `source` ends empty. The underlying
        storage changes owner, nothing is copied.

        Raises:
            PreconditionViolation: If `source` is this database or is not a
                `KernelDatabase` of the same kind.
        """
        if source is self:
            raise PreconditionViolation("cannot transfer a database into itself")
        if not isinstance(source, KernelDatabase) or source.kind != self._kind:
            raise PreconditionViolation(
                f"cannot transfer from {type(source).__name__}"
                f"(kind={getattr(source, 'kind', None)!r}) into kind {self._kind!r}"
            )

        count = len(source._storage)
        self._storage = source._storage
        source._storage = create_storage(source._kind)
        self._revision += 1
        source._revision += 1
        logger.debug("Transferred %d entries (kind=%s)", count, self._kind)

    def add_entry(self, song: Song) -> None:
        """Append `song` at the end, even if an equal song is present."""
        self._storage.append(song)
        self._revision += 1

    def remove_entry_by_order(self, index: int) -> Song:
        """
        Remove and return the song at `index`.

        Later entries move down by one position.

        Raises:
            PreconditionViolation: If `index` is out of range.
        """
        self._check_index(index)
        song = self._storage.pop(index)
        self._revision += 1
        return song

    def get_entry_by_order(self, index: int) -> Song:
        """
        Return the song at `index` without removing it.

        Raises:
            PreconditionViolation: If `index` is out of range.
        """
        self._check_index(index)
        return self._storage.get(index)

    def size(self) -> int:
        """Return the number of entries."""
        return len(self._storage)

    def ensure_capacity(self, capacity: int) -> None:
        """
        Hint that the database will hold at least `capacity` entries.

        Contents are never affected.
        """
        if capacity < 0:
            raise PreconditionViolation(f"capacity must be >= 0, got {capacity}")
        self._storage.reserve(capacity)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> SongCursor:
        return SongCursor(self)

    def _check_index(self, index: int) -> None:
        size = len(self._storage)
        if not 0 <= index < size:
            raise PreconditionViolation(f"index {index} out of range for size {size}")


class SongCursor(Iterator[Song]):
    """
    Forward cursor over a `KernelDatabase`.

    `remove()` deletes the entry most recently returned by `next()`, exactly
    like `remove_entry_by_order` on its position, and keeps iterating from the
    entry that moved into that position.

    While a cursor is live it is the only thing allowed to mutate the
    database; any other mutation makes its next step raise.
    """

    def __init__(self, db: KernelDatabase) -> None:
        self._db = db
        self._next_index = 0
        self._last_index: int | None = None
        self._revision = db._revision

    def __iter__(self) -> SongCursor:
        return self

    def has_next(self) -> bool:
        """Return True if `next()` would return another song."""
        self._check_revision()
        return self._next_index < self._db.size()

    def __next__(self) -> Song:
        self._check_revision()
        if self._next_index >= self._db.size():
            raise StopIteration
        song = self._db.get_entry_by_order(self._next_index)
        self._last_index = self._next_index
        self._next_index += 1
        return song

    def remove(self) -> Song:
        """
        Remove and return the song last returned by `next()`.

        Raises:
            PreconditionViolation: If `next()` has not been called since the
                last `remove()`, or the database was modified elsewhere.
        """
        self._check_revision()
        if self._last_index is None:
            raise PreconditionViolation("remove() requires a preceding next()")
        song = self._db.remove_entry_by_order(self._last_index)
        self._next_index = self._last_index
        self._last_index = None
        self._revision = self._db._revision
        return song

    def _check_revision(self) -> None:
        if self._revision != self._db._revision:
            raise PreconditionViolation("database was modified outside the cursor during iteration")
