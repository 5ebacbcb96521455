from dataclasses import dataclass

from bftcore.node import NodeCount, NodeIndex
from bftcore.rmc.message import MultisignedHash, SignedHash
from bftcore.signature import MultiKeychain, PartiallyMultisigned, SignatureSet, Signed


@dataclass(frozen=True)
class FakeSignature:
    msg: bytes
    index: int


class FakeKeychain(MultiKeychain):
    def __init__(self, count, index):
        self._count = NodeCount(count)
        self._index = NodeIndex(index)

    def index(self):
        return self._index

    def node_count(self):
        return self._count

    def sign(self, msg):
        return FakeSignature(msg, int(self._index))

    def verify(self, msg, signature, index):
        return signature.index == index and signature.msg == msg

    def bootstrap_multi(self, signature, index):
        return SignatureSet.with_size(self._count).add_signature(signature, index)

    def is_complete(self, msg, partial):
        if partial.item_count() < 2 * int(self._count) // 3 + 1:
            return False
        return all(self.verify(msg, sig, i) for i, sig in partial.items())


def test_signed_hash_message():
    keychain = FakeKeychain(7, 2)
    signed = Signed.sign_with_index("56", keychain)
    message = SignedHash(signed.into_unchecked())
    assert message.hash() == "56"
    assert not message.is_complete()


def test_multisigned_hash_message():
    keychain = FakeKeychain(1, 0)
    partial = PartiallyMultisigned.sign("56", keychain)
    assert partial.is_complete()
    message = MultisignedHash(partial.into_unchecked())
    assert message.hash() == "56"
    assert message.is_complete()


def test_message_equality():
    keychain = FakeKeychain(7, 1)
    first = SignedHash(Signed.sign_with_index("56", keychain).into_unchecked())
    second = SignedHash(Signed.sign_with_index("56", keychain).into_unchecked())
    other = SignedHash(Signed.sign_with_index("65", keychain).into_unchecked())
    assert first == second
    assert first != other


def test_message_kinds_differ():
    keychain = FakeKeychain(1, 0)
    unchecked = PartiallyMultisigned.sign("56", keychain).into_unchecked()
    signed = SignedHash(Signed.sign_with_index("56", keychain).into_unchecked())
    assert MultisignedHash(unchecked) != signed
    assert MultisignedHash(unchecked).hash() == signed.hash()