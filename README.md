# bftcore

Building blocks for asynchronous Byzantine fault tolerant protocols, in pure
Python with no runtime dependencies.

- `bftcore.codec`: a compact little-endian binary encoding. `encode_u8`,
  `encode_u16`, `encode_u32`, `encode_u64`, `encode_compact`, `encode_bytes`,
  `encode_option` and `encode_vec` write values. `Reader` reads them back and
  raises `CodecError` when the input is short or malformed.
- `bftcore.node`: `NodeIndex` and `NodeCount`, which are `int` subclasses.
  `NodeMap` holds optional items indexed by node. `NodeSubset` is a fixed-capacity
  set of node indices. Each type has an `encode` method and a decoder.
- `bftcore.signature`: the abstract `Keychain` and `MultiKeychain` classes,
  together with `Signed`, `UncheckedSigned`, `Indexed`, `Multisigned`,
  `SignatureSet` and `PartiallyMultisigned`. A `PartiallyMultisigned` is either
  `Incomplete` or `Complete` and collects signatures until the keychain judges
  them complete. Failed checks raise `SignatureError`.
- `bftcore.rmc`: reliable multicast of hashes.
  - `rmc.handler.Handler` tracks signatures for each hash. It raises
    `BadSignatureError` and `BadMultisignatureError`, both subclasses of `RmcError`.
  - `rmc.scheduler.DoublingDelayScheduler` repeats each task, first at once, then
    after the initial delay, and doubles the delay each time after that.
  - `rmc.message` defines the `SignedHash` and `MultisignedHash` messages.
  - `rmc.service.Service` joins the handler and the scheduler.
- `bftcore.chain`: `Block` with deterministic filler data and a binary encoding,
  and `ChainConfig.round_robin` for assigning block authors.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## A keychain

You supply the cryptography by subclassing `MultiKeychain`. The toy keychain
below "signs" a message by pairing it with its own index. It treats a
`SignatureSet` as complete once more than two thirds of the nodes have signed.

```python
from bftcore.node import NodeCount, NodeIndex
from bftcore.signature import MultiKeychain, SignatureSet


class ToyKeychain(MultiKeychain):
    def __init__(self, count, index):
        self._count = NodeCount(count)
        self._index = NodeIndex(index)

    def index(self):
        return self._index

    def node_count(self):
        return self._count

    def sign(self, msg):
        return (bytes(msg), self._index)

    def verify(self, msg, signature, index):
        return signature == (bytes(msg), index)

    def bootstrap_multi(self, signature, index):
        return SignatureSet.with_size(self._count).add_signature(signature, index)

    def is_complete(self, msg, partial):
        quorum = 2 * int(self._count) // 3 + 1
        return partial.item_count() >= quorum and all(
            self.verify(msg, sig, i) for i, sig in partial.items()
        )
```

## Collecting a multisignature

```python
from bftcore.signature import PartiallyMultisigned, Signed

keychains = [ToyKeychain(7, i) for i in range(7)]
partial = PartiallyMultisigned.sign(b"Hello", keychains[0])
for keychain in keychains[1:5]:
    partial = partial.add_signature(Signed.sign_with_index(b"Hello", keychain), keychain)
assert partial.is_complete()
```

`UncheckedSigned.check` verifies a single signature and
`UncheckedSigned.check_multi` verifies a multisignature. Both raise
`SignatureError` on failure.

## Reliable multicast

```python
import asyncio

from bftcore.rmc.handler import Handler
from bftcore.rmc.scheduler import DoublingDelayScheduler
from bftcore.rmc.service import Service


async def main():
    services = [
        Service(DoublingDelayScheduler(0.01), Handler(ToyKeychain(4, i)))
        for i in range(4)
    ]
    for service in services:
        service.start_rmc(b"block-hash")
    results = {}
    while len(results) < len(services):
        for sender, service in enumerate(services):
            message = await service.next_message()
            for receiver, peer in enumerate(services):
                if receiver != sender:
                    done = peer.process_message(message)
                    if done is not None:
                        results[receiver] = done
    return results


asyncio.run(main())
```

- `Service.start_rmc` signs a hash and schedules it for broadcast. It returns the
  `Multisigned` hash if our own signature completed it.
- `Service.process_message` returns a `Multisigned` hash the first time it
  becomes complete. Otherwise it returns `None`. Invalid messages are logged and
  ignored.
- `Service.next_message` waits for the next message due for broadcast. On an
  empty scheduler it waits forever.

## Blocks

```python
from bftcore.chain import Block, ChainConfig

block = Block.create(3, 1024)
assert Block.decode(block.encode()) == block

config = ChainConfig.round_robin(node_ix=0, n_members=4, data_size=1024,
                                 blocktime=1.0, init_delay=5.0)
assert config.author_of(8) == 0
```

## What this package does not do

- It has no network transport. Moving messages between nodes is left to the
  caller.
- It does not run a consensus session. It has no consensus units, no unit store
  and no unit validation.
- It has no storage and no command-line program.
- It ships no real cryptography. Keychains are the caller's to implement.