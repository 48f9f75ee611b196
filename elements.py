import hashlib
import secrets
import struct
from typing import Iterable, Protocol, Tuple, runtime_checkable


# Chosen once per process. Hash values must never be stored or compared
# across runs.
SEED = secrets.token_bytes(16)

MASK_64 = 0xFFFF_FFFF_FFFF_FFFF


@runtime_checkable
class Comparable(Protocol):
    """
    Capability every key of a FlatHashMap or element of a FlatHashSet provides.

    hash64 returns an unsigned 64-bit integer derived from the logical value,
    and equal values must produce equal hashes.
    """

    def hash64(self) -> int:
        ...

    def __eq__(self, other) -> bool:
        ...


def hash_bytes(data: bytes) -> int:
    digest = hashlib.blake2b(data, digest_size=8, key=SEED).digest()

    return int.from_bytes(digest, 'little')


def hash_uint64(u: int) -> int:
    return hash_bytes((u & MASK_64).to_bytes(8, 'little'))


def hash_int(i: int) -> int:
    """
    :param i: Any python integer.
    :return: The seeded hash of its two's complement representation,
        at least 8 bytes wide so that small values match hash_uint64.
    """
    length = max(8, (i.bit_length() + 8) // 8)

    return hash_bytes(i.to_bytes(length, 'little', signed=True))


def float_bits(f: float) -> int:
    return struct.unpack('<Q', struct.pack('<d', f))[0]


def hash_float(f: float) -> int:
    return hash_uint64(float_bits(f))


def combine_hashes(hashes: Iterable[int]) -> int:
    """
    Order sensitive combination of 64-bit hashes: each hash is fed to the
    seeded hasher as 8 little-endian bytes.
    """
    h = hashlib.blake2b(digest_size=8, key=SEED)

    for u in hashes:
        h.update((u & MASK_64).to_bytes(8, 'little'))

    return int.from_bytes(h.digest(), 'little')


class _Element:
    __slots__ = ('value',)

    def __init__(self, value):
        object.__setattr__(self, 'value', value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented

        return self.value == other.value

    def __hash__(self):
        return hash(self.hash64())

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"

    def __str__(self):
        return str(self.value)


class Int(_Element):
    __slots__ = ()

    def __init__(self, value: int):
        super().__init__(int(value))

    def hash64(self) -> int:
        return hash_int(self.value)


class Float(_Element):
    """
    Hashing and equality use the IEEE 754 binary64 bits, so NaN equals
    itself and 0.0 differs from -0.0.
    """
    __slots__ = ()

    def __init__(self, value: float):
        super().__init__(float(value))

    def hash64(self) -> int:
        return hash_float(self.value)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented

        return float_bits(self.value) == float_bits(other.value)


class Complex(_Element):
    __slots__ = ()

    def __init__(self, value: complex):
        super().__init__(complex(value))

    def _bits_(self) -> Tuple[int, int]:
        return float_bits(self.value.real), float_bits(self.value.imag)

    def hash64(self) -> int:
        real, imag = self._bits_()

        return hash_bytes(real.to_bytes(8, 'little') + imag.to_bytes(8, 'little'))

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented

        return self._bits_() == other._bits_()


class Bool(_Element):
    __slots__ = ()

    def __init__(self, value: bool):
        super().__init__(bool(value))

    def hash64(self) -> int:
        return hash_bytes(b'\x01' if self.value else b'\x00')


class String(_Element):
    __slots__ = ()

    def __init__(self, value: str):
        super().__init__(str(value))

    def hash64(self) -> int:
        return hash_bytes(self.value.encode('utf-8', 'surrogatepass'))


class Bytes(_Element):
    __slots__ = ()

    def __init__(self, value: bytes):
        super().__init__(bytes(value))

    def hash64(self) -> int:
        return hash_bytes(self.value)


class Slice(_Element):
    """
    An immutable sequence of Comparable elements.

    Two slices are equal when they have the same length and pairwise equal
    elements, so order matters. Elements that are themselves sets compare
    regardless of the order their members were added in.
    """
    __slots__ = ()

    def __init__(self, value: Iterable[Comparable] = ()):
        super().__init__(tuple(value))

    def hash64(self) -> int:
        return combine_hashes(element.hash64() for element in self.value)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented

        if len(self.value) != len(other.value):
            return False

        return all(a == b for a, b in zip(self.value, other.value))

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def __str__(self):
        return f"[{', '.join(str(e) for e in self.value)}]"
