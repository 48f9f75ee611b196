import logging
from typing import Generic, Iterator, List, Optional, Tuple, TypeVar

import numpy as np

from elements import MASK_64


logger = logging.getLogger(__name__)

INITIAL_CAPACITY = 16

# Set on every stored hash, so a zero tag always means an empty slot.
FULL_BIT = 1 << 63

K = TypeVar('K')
V = TypeVar('V')


def tag(h: int) -> int:
    return (h & MASK_64) | FULL_BIT


class OpenTable(Generic[K, V]):
    """
    Open addressing table with linear probing and backward-shift deletion.

    Slots are spread over parallel columns: a numpy uint64 column of tagged
    hashes, a list of keys and, when the table carries values, a list of
    values. Nothing is allocated until the first insert.

    Subclasses observe structural changes through the _filled_, _cleared_
    and _reset_ hooks. Each fires once per slot written or cleared.
    """
    _hashes: Optional[np.ndarray]
    _keys: List[Optional[K]]
    _values: Optional[List[Optional[V]]]
    _count: int
    _has_values: bool

    def __init__(self, has_values: bool = True):
        self._has_values = has_values
        self._hashes = None
        self._keys = []
        self._values = [] if has_values else None
        self._count = 0

    def _allocate_(self, capacity: int):
        self._hashes = np.zeros(capacity, dtype=np.uint64)
        self._keys = [None] * capacity

        if self._has_values:
            self._values = [None] * capacity

    def _filled_(self, tagged: int):
        pass

    def _cleared_(self, tagged: int):
        pass

    def _reset_(self):
        pass

    @property
    def capacity(self) -> int:
        if self._hashes is None:
            return 0

        return len(self._hashes)

    def _find_(self, tagged: int, key: K) -> Tuple[int, bool]:
        """
        Probe for key starting at its home slot.

        :param tagged: The tagged hash of key.
        :param key: The key to search for.
        :return: A tuple containing
            - the index of the matching slot, or of the empty slot that ends the probe
            - a boolean indicating if the key was found
        """
        hashes = self._hashes
        mask = len(hashes) - 1
        index = tagged & mask

        while True:
            current = hashes.item(index)

            if current == 0:
                return index, False

            if current == tagged and self._keys[index] == key:
                return index, True

            index = (index + 1) & mask

    def _contains_(self, tagged: int, key: K) -> bool:
        if self._count == 0:
            return False

        _, found = self._find_(tagged, key)

        return found

    def _lookup_(self, tagged: int, key: K) -> Tuple[Optional[V], bool]:
        if self._count == 0:
            return None, False

        index, found = self._find_(tagged, key)

        if not found or not self._has_values:
            return None, found

        return self._values[index], True

    def _insert_(self, tagged: int, key: K, value: Optional[V] = None) -> bool:
        """
        :return: True if a new slot was filled, False if the key was already present.
        """
        if self._hashes is None:
            self._allocate_(INITIAL_CAPACITY)

        index, found = self._find_(tagged, key)

        if found:
            if self._has_values:
                self._values[index] = value

            return False

        self._hashes[index] = tagged
        self._keys[index] = key

        if self._has_values:
            self._values[index] = value

        self._count += 1
        self._filled_(tagged)

        if self._count > 3 * len(self._hashes) // 4:
            self._resize_(len(self._hashes) * 2)

        return True

    def _clear_slot_(self, index: int) -> Tuple[int, K, Optional[V]]:
        tagged = self._hashes.item(index)
        key = self._keys[index]
        value = None

        self._hashes[index] = 0
        self._keys[index] = None

        if self._has_values:
            value = self._values[index]
            self._values[index] = None

        self._count -= 1
        self._cleared_(tagged)

        return tagged, key, value

    def _remove_(self, tagged: int, key: K) -> Tuple[Optional[V], bool]:
        """
        Remove key if present, then repair the cluster that followed it.

        :return: A tuple containing the removed value (None for sets or when
            absent) and a boolean indicating if the key was found.
        """
        if self._count == 0:
            return None, False

        index, found = self._find_(tagged, key)

        if not found:
            return None, False

        _, _, value = self._clear_slot_(index)
        capacity = len(self._hashes)

        if capacity > INITIAL_CAPACITY and self._count < capacity // 4:
            self._resize_(capacity // 2)

            return value, True

        mask = capacity - 1
        index = (index + 1) & mask

        while self._hashes.item(index) != 0:
            moved_tag, moved_key, moved_value = self._clear_slot_(index)
            self._insert_(moved_tag, moved_key, moved_value)

            index = (index + 1) & mask

        return value, True

    def _resize_(self, capacity: int):
        logger.debug("resizing %s from %d to %d slots with %d entries",
                     type(self).__name__, len(self._hashes), capacity, self._count)

        live = list(self._entries_())

        self._allocate_(capacity)
        self._count = 0
        self._reset_()

        for tagged, key, value in live:
            self._insert_(tagged, key, value)

    def _live_indexes_(self) -> np.ndarray:
        if self._hashes is None:
            return np.empty(0, dtype=np.intp)

        return np.flatnonzero(self._hashes)

    def _entries_(self) -> Iterator[Tuple[int, K, Optional[V]]]:
        """
        Yields (tagged hash, key, value) for every live slot in array order.
        """
        values = self._values

        for index in self._live_indexes_():
            value = values[index] if self._has_values else None

            yield self._hashes.item(index), self._keys[index], value

    def _copy_into_(self, other: 'OpenTable'):
        other._count = self._count

        if self._hashes is None:
            return

        other._hashes = self._hashes.copy()
        other._keys = list(self._keys)

        if self._has_values:
            other._values = list(self._values)

    def __len__(self):
        return self._count
