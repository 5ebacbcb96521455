"""Node addressing: indices, counts, per-node maps and node subsets."""

from __future__ import annotations

from typing import (
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from .codec import (
    CodecError,
    Reader,
    encode_bytes,
    encode_option,
    encode_u32,
    encode_u64,
    encode_vec,
)

T = TypeVar("T")
_NI = TypeVar("_NI", bound="NodeIndex")
_NM = TypeVar("_NM", bound="NodeMap")
_NS = TypeVar("_NS", bound="NodeSubset")


class NodeIndex(int):
    """The index of a node."""

    def __new__(cls, value: int = 0) -> "NodeIndex":
        if value < 0:
            raise ValueError("node index must be non-negative")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"NodeIndex({int(self)})"

    def encode(self) -> bytes:
        """Encode as an unsigned 64-bit little-endian integer."""
        return encode_u64(int(self))

    @classmethod
    def decode(cls: Type[_NI], data: bytes) -> _NI:
        return cls.decode_from(Reader(data))

    @classmethod
    def decode_from(cls: Type[_NI], reader: Reader) -> _NI:
        return cls(reader.read_u64())


class NodeCount(int):
    """A number of nodes; also used as node weight."""

    def __new__(cls, value: int = 0) -> "NodeCount":
        if value < 0:
            raise ValueError("node count must be non-negative")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"NodeCount({int(self)})"

    def __add__(self, other: int) -> "NodeCount":
        if not isinstance(other, int):
            return NotImplemented
        return NodeCount(int(self) + int(other))

    __radd__ = __add__

    def __sub__(self, other: int) -> "NodeCount":
        if not isinstance(other, int):
            return NotImplemented
        return NodeCount(int(self) - int(other))

    def __mul__(self, other: int) -> "NodeCount":
        if not isinstance(other, int):
            return NotImplemented
        return NodeCount(int(self) * int(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: int) -> "NodeCount":
        if not isinstance(other, int):
            return NotImplemented
        return NodeCount(int(self) // int(other))

    def indices(self) -> Iterator[NodeIndex]:
        """All node indices below this count, in order."""
        return (NodeIndex(i) for i in range(int(self)))


def _check_index(index: int, size: int) -> int:
    if not 0 <= index < size:
        raise IndexError(f"node index {index} out of range for size {size}")
    return int(index)


class NodeMap(Generic[T]):
    """A container of optional items indexed by node."""

    def __init__(self, slots: Iterable[Optional[T]] = ()) -> None:
        self._slots: List[Optional[T]] = list(slots)

    @classmethod
    def with_size(cls: Type[_NM], size: int) -> _NM:
        """An empty map for ``size`` nodes."""
        return cls([None] * int(size))

    @classmethod
    def from_mapping(cls: Type[_NM], size: int, mapping: Mapping[int, T]) -> _NM:
        """A map for ``size`` nodes filled from a mapping of index to item."""
        node_map = cls.with_size(size)
        for node_id, item in mapping.items():
            node_map.insert(node_id, item)
        return node_map

    def size(self) -> NodeCount:
        return NodeCount(len(self._slots))

    def items(self) -> Iterator[Tuple[NodeIndex, T]]:
        """Present entries as (index, item) pairs in index order."""
        return (
            (NodeIndex(idx), value)
            for idx, value in enumerate(self._slots)
            if value is not None
        )

    def values(self) -> Iterator[T]:
        return (value for _, value in self.items())

    def get(self, node_id: int) -> Optional[T]:
        return self._slots[_check_index(node_id, len(self._slots))]

    def insert(self, node_id: int, value: T) -> None:
        self._slots[_check_index(node_id, len(self._slots))] = value

    def to_subset(self) -> "NodeSubset":
        """The set of indices that hold an item."""
        return NodeSubset(value is not None for value in self._slots)

    def item_count(self) -> int:
        return sum(1 for _ in self.items())

    def encode(self, encode_item: Callable[[T], bytes]) -> bytes:
        """Encode as a length-prefixed sequence of optional items."""
        return encode_vec(self._slots, lambda slot: encode_option(slot, encode_item))

    @classmethod
    def decode_from(
        cls: Type[_NM], reader: Reader, decode_item: Callable[[Reader], T]
    ) -> _NM:
        return cls(reader.read_vec(lambda r: r.read_option(decode_item)))

    def __iter__(self) -> Iterator[Tuple[NodeIndex, T]]:
        return self.items()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeMap):
            return NotImplemented
        return self._slots == other._slots

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"NodeMap({self._slots!r})"

    def __str__(self) -> str:
        return "[" + ", ".join(f"({int(idx)}, {item})" for idx, item in self.items()) + "]"


class NodeSubset:
    """A set of node indices with a fixed capacity."""

    def __init__(self, bits: Iterable[bool] = ()) -> None:
        self._bits: List[bool] = [bool(bit) for bit in bits]

    @classmethod
    def with_size(cls: Type[_NS], capacity: int) -> _NS:
        return cls([False] * int(capacity))

    def insert(self, index: int) -> None:
        self._bits[_check_index(index, len(self._bits))] = True

    def size(self) -> int:
        """The capacity of the subset."""
        return len(self._bits)

    def elements(self) -> Iterator[NodeIndex]:
        return (NodeIndex(i) for i, bit in enumerate(self._bits) if bit)

    def __len__(self) -> int:
        return sum(self._bits)

    def is_empty(self) -> bool:
        return len(self) == 0

    def __getitem__(self, index: int) -> bool:
        return self._bits[_check_index(index, len(self._bits))]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeSubset):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash(tuple(self._bits))

    def __repr__(self) -> str:
        return f"NodeSubset({self._bits!r})"

    def __str__(self) -> str:
        return str(sorted(int(i) for i in self.elements()))

    def _to_bytes(self) -> bytes:
        chunks = (self._bits[start:start + 8] for start in range(0, len(self._bits), 8))
        return bytes(
            sum(1 << (7 - offset) for offset, bit in enumerate(chunk) if bit)
            for chunk in chunks
        )

    def encode(self) -> bytes:
        """Encode as a u32 capacity followed by the packed bits, most significant first."""
        return encode_u32(len(self._bits)) + encode_bytes(self._to_bytes())

    @classmethod
    def decode(cls: Type[_NS], data: bytes) -> _NS:
        return cls.decode_from(Reader(data))

    @classmethod
    def decode_from(cls: Type[_NS], reader: Reader) -> _NS:
        capacity = reader.read_u32()
        packed = reader.read_bytes()
        bits = [bool((byte >> (7 - offset)) & 1) for byte in packed for offset in range(8)]
        # Length should be capacity rounded up to the closest multiple of 8.
        if len(bits) != 8 * ((capacity + 7) // 8):
            raise CodecError("Length of bitvector inconsistent with encoded capacity.")
        if any(bits[capacity:]):
            raise CodecError("Non-canonical encoding. Trailing bits should be all 0.")
        return cls(bits[:capacity])


SignatureMap = Dict  # plain alias kept for callers that annotate index-keyed dicts