from dataclasses import dataclass

import pytest

from bftcore.node import NodeCount, NodeIndex
from bftcore.rmc.handler import (
    BadMultisignatureError,
    BadSignatureError,
    Handler,
    MultisignedHashResponse,
    NoopResponse,
    RmcError,
    SignedHashResponse,
)
from bftcore.signature import (
    Complete,
    Incomplete,
    MultiKeychain,
    SignatureSet,
    Signed,
)


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


class BadSigning(FakeKeychain):
    def sign(self, msg):
        return FakeSignature(b"bad" + msg, int(self._index))


def apply_signatures(handler, hash, count, nodes):
    for i in nodes:
        keychain_i = FakeKeychain(count, i)
        signed = Signed.sign_with_index(hash, keychain_i)
        handler.on_signed_hash(signed.into_unchecked())


def apply_signatures_and_get_multisigned(handler, hash, count, nodes):
    multisigned = None
    for i in nodes:
        keychain_i = FakeKeychain(count, i)
        signed = Signed.sign_with_index(hash, keychain_i)
        handler.on_signed_hash(signed.into_unchecked())
        if multisigned is None:
            multisigned = signed.into_partially_multisigned(keychain_i)
        else:
            multisigned = multisigned.add_signature(signed, keychain_i)
    assert multisigned is not None
    return multisigned


def test_on_start_rmc_before_reaching_quorum_returns_signed():
    keychain = FakeKeychain(7, 0)
    handler = Handler(keychain)
    expected = Signed.sign_with_index("13", keychain)
    assert handler.on_start_rmc("13") == SignedHashResponse(expected)


def test_on_start_rmc_reaching_quorum_returns_multisigned():
    keychain = FakeKeychain(7, 0)
    handler = Handler(keychain)
    multisigned = apply_signatures_and_get_multisigned(handler, "13", 7, range(1, 5))
    multisigned = multisigned.add_signature(Signed.sign_with_index("13", keychain), keychain)
    assert isinstance(multisigned, Complete)
    assert handler.on_start_rmc("13") == MultisignedHashResponse(multisigned.multisigned)


def test_on_start_rmc_after_reaching_quorum_returns_noop():
    keychain = FakeKeychain(7, 0)
    handler = Handler(keychain)
    apply_signatures(handler, "13", 7, range(1, 6))
    assert handler.on_start_rmc("13") == NoopResponse()


def test_on_signed_hash_before_reaching_quorum_returns_none():
    handler = Handler(FakeKeychain(7, 0))
    peer_signed = Signed.sign_with_index("13", FakeKeychain(7, 1))
    assert handler.on_signed_hash(peer_signed.into_unchecked()) is None


def test_on_signed_hash_reaching_quorum_returns_multisigned():
    handler = Handler(FakeKeychain(7, 0))
    peer_keychain = FakeKeychain(7, 1)
    multisigned = apply_signatures_and_get_multisigned(handler, "13", 7, range(2, 6))
    peer_signed = Signed.sign_with_index("13", peer_keychain)
    multisigned = multisigned.add_signature(peer_signed, peer_keychain)
    assert isinstance(multisigned, Complete)
    assert handler.on_signed_hash(peer_signed.into_unchecked()) == multisigned.multisigned


def test_on_signed_hash_after_reaching_quorum_returns_none():
    keychain = FakeKeychain(7, 0)
    handler = Handler(keychain)
    apply_signatures(handler, "13", 7, range(1, 6))
    our_signed = Signed.sign_with_index("13", keychain)
    assert handler.on_signed_hash(our_signed.into_unchecked()) is None


def test_on_signed_hash_with_bad_signature_fails():
    handler = Handler(FakeKeychain(7, 0))
    bad_signed = Signed.sign_with_index("13", BadSigning(7, 1))
    with pytest.raises(BadSignatureError) as info:
        handler.on_signed_hash(bad_signed.into_unchecked())
    assert str(info.value) == "received a hash with a bad signature."
    assert isinstance(info.value, RmcError)


def test_on_multisigned_hash_with_new_multisigned_returns_multisigned():
    handler = Handler(FakeKeychain(7, 0))
    peer_handler = Handler(FakeKeychain(7, 1))
    multisigned = apply_signatures_and_get_multisigned(peer_handler, "13", 7, range(1, 6))
    assert isinstance(multisigned, Complete)
    result = handler.on_multisigned_hash(multisigned.multisigned.into_unchecked())
    assert result == multisigned.multisigned


def test_on_multisigned_hash_with_known_multisigned_returns_none():
    handler = Handler(FakeKeychain(7, 0))
    multisigned = apply_signatures_and_get_multisigned(handler, "13", 7, range(1, 6))
    assert isinstance(multisigned, Complete)
    assert handler.on_multisigned_hash(multisigned.multisigned.into_unchecked()) is None


def test_on_multisigned_hash_with_bad_multisignature_fails():
    handler = Handler(FakeKeychain(7, 0))
    multisigned = apply_signatures_and_get_multisigned(handler, "13", 7, range(1, 5))
    assert isinstance(multisigned, Incomplete)
    with pytest.raises(BadMultisignatureError) as info:
        handler.on_multisigned_hash(multisigned.unchecked)
    assert str(info.value) == "received a hash with a bad multisignature."


def test_multisigned_hash_then_start_rmc_is_noop():
    handler = Handler(FakeKeychain(7, 0))
    peer_handler = Handler(FakeKeychain(7, 1))
    multisigned = apply_signatures_and_get_multisigned(peer_handler, "13", 7, range(1, 6))
    handler.on_multisigned_hash(multisigned.into_unchecked())
    assert handler.on_start_rmc("13") == NoopResponse()