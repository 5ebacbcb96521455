"""Blocks and configuration of a simple round-robin blockchain."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Union

from .codec import Reader, encode_bytes, encode_u32
from .node import NodeIndex

logger = logging.getLogger("bftcore.chain")

BlockNum = int

BlockPlan = Callable[[BlockNum], NodeIndex]
"""Tells which node should author a given block."""


def _as_timedelta(value: Union[float, int, timedelta]) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


@dataclass(frozen=True, order=True)
class Block:
    """A numbered block carrying filler data."""

    num: BlockNum
    data: bytes = b""

    @classmethod
    def create(cls, num: BlockNum, size: int) -> "Block":
        """A block with ``size`` bytes of deterministic, loosely varied filler."""
        logger.debug("Started creating block %r", num)
        data = bytes((i + i // 999 + (i >> 12)) % 8 for i in range(size))
        logger.debug("Finished creating block %r", num)
        return cls(num, data)

    def encode(self) -> bytes:
        """The number as u32 followed by the length-prefixed data."""
        return encode_u32(self.num) + encode_bytes(self.data)

    @classmethod
    def decode(cls, data: bytes) -> "Block":
        reader = Reader(data)
        num = reader.read_u32()
        return cls(num, reader.read_bytes())

    def __repr__(self) -> str:
        return f"Block(num={self.num!r})"


@dataclass(frozen=True)
class ChainConfig:
    """How a node takes part in the blockchain."""

    node_ix: NodeIndex
    data_size: int
    blocktime: timedelta
    init_delay: timedelta
    authorship_plan: BlockPlan = field(repr=False, compare=False)

    @classmethod
    def round_robin(
        cls,
        node_ix: int,
        n_members: int,
        data_size: int,
        blocktime: Union[float, int, timedelta],
        init_delay: Union[float, int, timedelta],
    ) -> "ChainConfig":
        """A configuration in which node ``k`` authors the blocks numbered ``k`` modulo ``n_members``."""
        if n_members <= 0:
            raise ValueError("the number of members must be positive")

        def plan(num: BlockNum) -> NodeIndex:
            return NodeIndex(num % n_members)

        return cls(
            NodeIndex(node_ix),
            data_size,
            _as_timedelta(blocktime),
            _as_timedelta(init_delay),
            plan,
        )

    def author_of(self, block_num: BlockNum) -> NodeIndex:
        """The node that should author block ``block_num``."""
        return self.authorship_plan(block_num)