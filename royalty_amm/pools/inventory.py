"""Item inventory index for a single pool.

Items are kept in an ordered list with a parallel id -> position map, so
insertion and removal-by-value are both O(1). Removal swaps the target with
the last element and truncates, so list order is not insertion order.

While a journal is open (begin), each insert and removal is recorded with the
position it touched, so rollback() undoes an operation in time proportional to
what it changed rather than to the inventory size.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from royalty_amm.errors import ErrorReason, PreconditionError


class ItemInventory:
    """Index-tracked set of item ids held by a pool."""

    __slots__ = ("_ids", "_index", "_journal")

    def __init__(self, item_ids: Iterable[int] | None = None) -> None:
        self._ids: list[int] = []
        self._index: dict[int, int] = {}
        self._journal: list[tuple[int, int | None]] | None = None
        if item_ids is not None:
            for item_id in item_ids:
                self.insert(item_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def __repr__(self) -> str:
        return f"ItemInventory({len(self._ids)} items)"

    @property
    def item_ids(self) -> list[int]:
        """Copy of the ordered id sequence."""
        return list(self._ids)

    def position(self, item_id: int) -> int | None:
        """Recorded position of item_id, or None if absent."""
        return self._index.get(item_id)

    def insert(self, item_id: int) -> None:
        """Append item_id and record its position.

        Raises:
            PreconditionError: If the item is already present
        """
        if item_id in self._index:
            raise PreconditionError(
                f"Item {item_id} already in pool", ErrorReason.ITEM_ALREADY_IN_POOL
            )
        self._index[item_id] = len(self._ids)
        self._ids.append(item_id)
        if self._journal is not None:
            self._journal.append((item_id, None))

    def remove(self, item_id: int) -> None:
        """Remove item_id by swapping it with the last element and truncating.

        Raises:
            PreconditionError: If the item is not present
        """
        position = self._index.get(item_id)
        if position is None:
            raise PreconditionError(f"Item {item_id} not in pool", ErrorReason.ITEM_NOT_IN_POOL)

        last_id = self._ids[-1]
        self._ids[position] = last_id
        self._index[last_id] = position
        self._ids.pop()
        del self._index[item_id]
        if self._journal is not None:
            self._journal.append((item_id, position))

    # --- Undo journal ---

    def begin(self) -> None:
        """Start recording inserts and removals so they can be rolled back."""
        self._journal = []

    def commit(self) -> None:
        self._journal = None

    def rollback(self) -> None:
        """Undo every insert and removal since begin(), newest first."""
        journal, self._journal = self._journal or [], None
        for item_id, position in reversed(journal):
            if position is None:
                self._ids.pop()
                del self._index[item_id]
            elif position == len(self._ids):
                self._index[item_id] = position
                self._ids.append(item_id)
            else:
                # Undo the swap: the moved id goes back to the end
                moved_id = self._ids[position]
                self._index[moved_id] = len(self._ids)
                self._ids.append(moved_id)
                self._ids[position] = item_id
                self._index[item_id] = position

    @property
    def pending_changes(self) -> int:
        """Number of journaled changes since begin()."""
        return len(self._journal) if self._journal is not None else 0

    # --- Consistency ---

    def touched_consistent(self) -> bool:
        """Check only the ids changed since begin(), plus the list/index sizes.

        A removal also moves the last id, so that id's slot is checked too.
        """
        if len(self._ids) != len(self._index):
            return False
        for item_id, position in self._journal or []:
            recorded = self._index.get(item_id)
            if recorded is not None and self._ids[recorded] != item_id:
                return False
            if position is not None and position < len(self._ids):
                if self._index.get(self._ids[position]) != position:
                    return False
        return True

    def is_consistent(self) -> bool:
        """True if every id's recorded position matches its true position."""
        if len(self._ids) != len(self._index):
            return False
        return all(self._index.get(item_id) == i for i, item_id in enumerate(self._ids))
