from typing import Callable, Iterator, Optional, Tuple, TypeVar

from elements import Comparable
from hash_table import OpenTable, tag


K = TypeVar('K', bound=Comparable)
V = TypeVar('V')


class FlatHashMap(OpenTable[K, V]):
    """
    Hash map using open addressing with linear probing. It is not thread-safe.

    Keys implement Comparable (hash64 and ==). A new map is empty and ready to
    use; its slots are allocated on the first put.
    """

    def __init__(self):
        super().__init__(has_values=True)

    def size(self) -> int:
        return self._count

    def get(self, key: K) -> Tuple[Optional[V], bool]:
        """
        :param key: The key to search for in the FlatHashMap.
        :return: A tuple containing the value associated with the key (None if
            absent) and a boolean indicating if the key was found.
        """
        if self._count == 0:
            return None, False

        return self._lookup_(tag(key.hash64()), key)

    def put(self, key: K, value: V):
        """
        Add the key-value pair to the map, updating the value if the key is
        already present. Filling past three quarters of the slots doubles the
        table.
        """
        self._insert_(tag(key.hash64()), key, value)

    def remove(self, key: K) -> Optional[V]:
        """
        :param key: The key to be removed from the FlatHashMap.
        :return: The value associated with the specified key, or None if the key is not found.
        """
        if self._count == 0:
            return None

        value, _ = self._remove_(tag(key.hash64()), key)

        return value

    def for_each(self, visitor: Callable[[K, V], None]):
        """
        Call visitor(key, value) for every entry in slot order. The first
        exception raised by the visitor stops the iteration and propagates.
        """
        for _, key, value in self._entries_():
            visitor(key, value)

    def copy(self) -> 'FlatHashMap[K, V]':
        hash_map = FlatHashMap()
        self._copy_into_(hash_map)

        return hash_map

    def keys(self) -> Iterator[K]:
        return (k for _, k, _ in self._entries_())

    def values(self) -> Iterator[V]:
        return (v for _, _, v in self._entries_())

    def items(self) -> Iterator[Tuple[K, V]]:
        return ((k, v) for _, k, v in self._entries_())

    def __contains__(self, key):
        if self._count == 0:
            return False

        return self._contains_(tag(key.hash64()), key)

    def __getitem__(self, key: K) -> V:
        value, found = self.get(key)

        if not found:
            raise KeyError(key)

        return value

    def __setitem__(self, key: K, value: V):
        self.put(key, value)

    def __delitem__(self, key: K):
        if self._count == 0:
            raise KeyError(key)

        _, found = self._remove_(tag(key.hash64()), key)

        if not found:
            raise KeyError(key)

    def __iter__(self):
        return self.items()

    def __str__(self):
        return f"{list(self.items())}, cap={self.capacity}"

    def __repr__(self):
        return self.__str__()
