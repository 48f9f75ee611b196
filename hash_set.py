from typing import Callable, Iterable, Iterator, Tuple, TypeVar

from elements import Comparable, Int
from hash_table import OpenTable, tag


K = TypeVar('K', bound=Comparable)


class FlatHashSet(OpenTable[K, None]):
    """
    Hash set using open addressing with linear probing. It is not thread-safe.

    The set keeps the XOR of the tagged hashes of its members, which makes
    hash64 O(1) and independent of insertion order. A FlatHashSet is itself
    Comparable, so it can be a key of a FlatHashMap or a member of another set.
    """
    _xor: int

    def __init__(self, iterable: Iterable[K] = ()):
        super().__init__(has_values=False)
        self._xor = 0

        for value in iterable:
            self.add(value)

    def _filled_(self, tagged: int):
        self._xor ^= tagged

    def _cleared_(self, tagged: int):
        self._xor ^= tagged

    def _reset_(self):
        self._xor = 0

    def size(self) -> int:
        return self._count

    def contains(self, value: K) -> bool:
        if self._count == 0:
            return False

        return self._contains_(tag(value.hash64()), value)

    def add(self, value: K):
        self._insert_(tag(value.hash64()), value)

    def remove(self, value: K):
        if self._count == 0:
            return

        self._remove_(tag(value.hash64()), value)

    def for_each(self, visitor: Callable[[K], None]):
        """
        Call visitor(value) for every member in slot order. The first
        exception raised by the visitor stops the iteration and propagates.
        """
        for _, value, _ in self._entries_():
            visitor(value)

    def copy(self) -> 'FlatHashSet[K]':
        hash_set = FlatHashSet()
        self._copy_into_(hash_set)
        hash_set._xor = self._xor

        return hash_set

    def hash64(self) -> int:
        if self._count == 0:
            return EMPTY_SET_HASH

        return self._xor

    def _members_(self) -> Iterator[Tuple[int, K]]:
        return ((tagged, value) for tagged, value, _ in self._entries_())

    def equals(self, other: 'FlatHashSet[K]') -> bool:
        """
        Sets of different size or aggregate hash are unequal. Otherwise the
        members of one are looked up in the other by their stored tagged hash.
        """
        if self._count != other._count:
            return False

        if self._count == 0:
            return True

        if self.hash64() != other.hash64():
            return False

        return all(other._contains_(tagged, value) for tagged, value in self._members_())

    def is_subset(self, other: 'FlatHashSet[K]') -> bool:
        if self._count > other._count:
            return False

        return all(other._contains_(tagged, value) for tagged, value in self._members_())

    def is_disjoint(self, other: 'FlatHashSet[K]') -> bool:
        if self._count == 0 or other._count == 0:
            return True

        smaller, larger = _by_size_(self, other)

        return not any(larger._contains_(tagged, value) for tagged, value in smaller._members_())

    def union(self, other: 'FlatHashSet[K]') -> 'FlatHashSet[K]':
        smaller, larger = _by_size_(self, other)
        hash_set = larger.copy()

        for tagged, value in smaller._members_():
            hash_set._insert_(tagged, value)

        return hash_set

    def intersection(self, other: 'FlatHashSet[K]') -> 'FlatHashSet[K]':
        hash_set = FlatHashSet()

        if self._count == 0 or other._count == 0:
            return hash_set

        smaller, larger = _by_size_(self, other)

        for tagged, value in smaller._members_():
            if larger._contains_(tagged, value):
                hash_set._insert_(tagged, value)

        return hash_set

    def difference(self, other: 'FlatHashSet[K]') -> 'FlatHashSet[K]':
        """
        :return: A new set with the members of self that are not in other.
        """
        if other._count < self._count:
            hash_set = self.copy()

            for tagged, value in other._members_():
                hash_set._remove_(tagged, value)

            return hash_set

        hash_set = FlatHashSet()

        for tagged, value in self._members_():
            if not other._contains_(tagged, value):
                hash_set._insert_(tagged, value)

        return hash_set

    def __contains__(self, item):
        return self.contains(item)

    def __iter__(self):
        return (value for _, value in self._members_())

    def __eq__(self, other):
        if not isinstance(other, FlatHashSet):
            return NotImplemented

        return self.equals(other)

    __hash__ = None

    def __le__(self, other):
        if not isinstance(other, FlatHashSet):
            return NotImplemented

        return self.is_subset(other)

    def __or__(self, other):
        if not isinstance(other, FlatHashSet):
            return NotImplemented

        return self.union(other)

    __add__ = __or__

    def __and__(self, other):
        if not isinstance(other, FlatHashSet):
            return NotImplemented

        return self.intersection(other)

    def __sub__(self, other):
        if not isinstance(other, FlatHashSet):
            return NotImplemented

        return self.difference(other)

    def __str__(self):
        return "{" + ", ".join(str(value) for value in self) + "}"

    def __repr__(self):
        return f"FlatHashSet({self.__str__()})"


def _by_size_(a: FlatHashSet, b: FlatHashSet) -> Tuple[FlatHashSet, FlatHashSet]:
    if a._count > b._count:
        return b, a

    return a, b


EMPTY_SET_HASH = tag(Int(0).hash64())
