from datetime import timedelta

import pytest

from bftcore.codec import CodecError
from bftcore.chain import Block, ChainConfig
from bftcore.node import NodeIndex


def test_block_has_requested_size_and_small_values():
    block = Block.create(3, 5000)
    assert block.num == 3
    assert len(block.data) == 5000
    assert set(block.data) <= set(range(8))


def test_block_data_pattern_values():
    data = Block.create(1, 2000).data
    assert data[:10] == bytes([0, 1, 2, 3, 4, 5, 6, 7, 0, 1])
    assert data[998] == 6
    assert data[999] == 0


def test_block_starts_with_counting_pattern():
    assert Block.create(1, 3).data == bytes([0, 1, 2])


def test_block_round_trip():
    block = Block.create(42, 1200)
    assert Block.decode(block.encode()) == block


def test_block_encoding_bytes():
    assert Block(5, b"\x01\x02").encode() == b"\x05\x00\x00\x00\x08\x01\x02"


def test_block_decode_truncated_input_fails():
    encoded = Block.create(7, 20).encode()
    with pytest.raises(CodecError):
        Block.decode(encoded[:-1])


def test_block_repr_shows_only_number():
    assert repr(Block.create(9, 100)) == "Block(num=9)"


def test_blocks_order_by_number():
    blocks = [Block.create(n, 4) for n in (3, 1, 2)]
    assert [b.num for b in sorted(blocks)] == [1, 2, 3]


def test_round_robin_each_member_authors_once_per_cycle():
    n_members = 4
    config = ChainConfig.round_robin(0, n_members, 10, 1.0, 5.0)
    authors = [config.author_of(k) for k in range(n_members)]
    assert sorted(authors) == [NodeIndex(i) for i in range(n_members)]
    for k in range(20):
        assert config.author_of(k + n_members) == config.author_of(k)


def test_round_robin_stores_configuration():
    config = ChainConfig.round_robin(2, 3, 100, 1, timedelta(seconds=5))
    assert config.node_ix == NodeIndex(2)
    assert config.data_size == 100
    assert config.blocktime == timedelta(seconds=1)
    assert config.init_delay == timedelta(seconds=5)


def test_round_robin_rejects_empty_committee():
    with pytest.raises(ValueError):
        ChainConfig.round_robin(0, 0, 10, 1.0, 1.0)