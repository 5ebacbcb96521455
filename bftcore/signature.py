"""Signing, verification and multisignature aggregation of signable data."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .node import NodeCount, NodeIndex, NodeMap

logger = logging.getLogger("bftcore.signed")

T = TypeVar("T")
S = TypeVar("S")


def signable_hash(signable: Any) -> bytes:
    """The bytes that are signed for ``signable``.

    Byte strings and text sign as themselves; any other object must provide
    a ``hash()`` method returning something convertible to bytes.
    """
    if isinstance(signable, (bytes, bytearray, memoryview)):
        return bytes(signable)
    if isinstance(signable, str):
        return signable.encode("utf-8")
    return bytes(signable.hash())


class Keychain(ABC):
    """Signs data as one node and verifies signatures of all nodes."""

    @abstractmethod
    def index(self) -> NodeIndex:
        """The index of the node owning the private key."""

    @abstractmethod
    def node_count(self) -> NodeCount:
        """The total number of known public keys."""

    @abstractmethod
    def sign(self, msg: bytes) -> Any:
        """Sign the message ``msg``."""

    @abstractmethod
    def verify(self, msg: bytes, signature: Any, index: int) -> bool:
        """Whether node ``index`` signed ``msg``; False for indices outside the node range."""


class MultiKeychain(Keychain):
    """A keychain that can also aggregate and judge multisignatures."""

    @abstractmethod
    def bootstrap_multi(self, signature: Any, index: int) -> Any:
        """A partial multisignature consisting of the single given signature."""

    @abstractmethod
    def is_complete(self, msg: bytes, partial: Any) -> bool:
        """Whether ``partial`` holds enough valid signatures of ``msg``."""


class SignatureSet(NodeMap[S]):
    """A partial multisignature made of individual signatures of a subset of nodes."""

    def add_signature(self, signature: S, index: int) -> "SignatureSet[S]":
        """A new set holding the existing signatures and ``signature`` for ``index``."""
        extended = type(self).from_mapping(self.size(), dict(self.items()))
        extended.insert(index, signature)
        return extended


@dataclass(frozen=True)
class Indexed(Generic[T]):
    """Signable data paired with the index of the node that signs it."""

    signable: T
    node_index: NodeIndex

    def index(self) -> NodeIndex:
        return self.node_index

    def hash(self) -> bytes:
        """The hash of the wrapped data; the index is not part of it."""
        return signable_hash(self.signable)

    def as_signable(self) -> T:
        return self.signable

    def strip_index(self) -> T:
        return self.signable


class SignatureError(Exception):
    """A signature or multisignature does not match the signed data."""

    def __init__(self, unchecked: "UncheckedSigned[Any, Any]") -> None:
        super().__init__("signature verification failed")
        self.unchecked = unchecked


@dataclass(frozen=True)
class UncheckedSigned(Generic[T, S]):
    """Signable data with a signature that has not been verified."""

    signable: T
    signature: S

    def as_signable(self) -> T:
        return self.signable

    def as_signable_strip_index(self) -> Any:
        """The data inside an :class:`Indexed` signable."""
        return self.signable.as_signable()  # type: ignore[attr-defined]

    def index(self) -> NodeIndex:
        return self.signable.index()  # type: ignore[attr-defined]

    def check(self, keychain: Keychain) -> "Signed[T]":
        """Verify the signature against the key of the index in the data."""
        if not keychain.verify(signable_hash(self.signable), self.signature, self.index()):
            raise SignatureError(self)
        return Signed(self)

    def check_multi(self, keychain: MultiKeychain) -> "Multisigned[T]":
        """Verify that the multisignature is complete and valid for the data."""
        if not keychain.is_complete(signable_hash(self.signable), self.signature):
            raise SignatureError(self)
        return Multisigned(self)

    def strip_index(self) -> "UncheckedSigned[Any, S]":
        """The same signature over the data inside an :class:`Indexed` signable."""
        return UncheckedSigned(self.signable.strip_index(), self.signature)  # type: ignore[attr-defined]


@dataclass(frozen=True)
class Signed(Generic[T]):
    """Data with a signature that has been produced or verified by a keychain."""

    unchecked: UncheckedSigned[T, Any]

    @classmethod
    def sign(cls, signable: T, keychain: Keychain) -> "Signed[T]":
        """Sign data whose index must equal the keychain's index."""
        data_index = signable.index()  # type: ignore[attr-defined]
        if data_index != keychain.index():
            raise ValueError(
                f"signable index {int(data_index)} does not match keychain index "
                f"{int(keychain.index())}"
            )
        signature = keychain.sign(signable_hash(signable))
        return cls(UncheckedSigned(signable, signature))

    @classmethod
    def sign_with_index(cls, signable: Any, keychain: Keychain) -> "Signed[Indexed[Any]]":
        """Sign data wrapped together with the keychain's index."""
        return cls.sign(Indexed(signable, NodeIndex(keychain.index())), keychain)

    def as_signable(self) -> T:
        return self.unchecked.signable

    def into_unchecked(self) -> UncheckedSigned[T, Any]:
        return self.unchecked

    def into_partially_multisigned(self, keychain: MultiKeychain) -> "PartiallyMultisigned":
        """Turn a signature over indexed data into a partial multisignature of the data."""
        indexed = self.unchecked.signable
        multisignature = keychain.bootstrap_multi(
            self.unchecked.signature, indexed.index()  # type: ignore[attr-defined]
        )
        unchecked = UncheckedSigned(indexed.strip_index(), multisignature)  # type: ignore[attr-defined]
        if keychain.is_complete(signable_hash(unchecked.signable), unchecked.signature):
            return Complete(Multisigned(unchecked))
        return Incomplete(unchecked)


@dataclass(frozen=True)
class Multisigned(Generic[T]):
    """Data together with a complete and valid multisignature."""

    unchecked: UncheckedSigned[T, Any]

    def as_signable(self) -> T:
        return self.unchecked.signable

    def into_unchecked(self) -> UncheckedSigned[T, Any]:
        return self.unchecked


class PartiallyMultisigned:
    """Data with a valid partial multisignature, either incomplete or complete."""

    @classmethod
    def sign(cls, signable: Any, keychain: MultiKeychain) -> "PartiallyMultisigned":
        """Start a multisignature of ``signable`` with the keychain's own signature."""
        return Signed.sign_with_index(signable, keychain).into_partially_multisigned(keychain)

    def is_complete(self) -> bool:
        return isinstance(self, Complete)

    def as_signable(self) -> Any:
        if isinstance(self, Complete):
            return self.multisigned.as_signable()
        return self.into_unchecked().as_signable()

    def into_unchecked(self) -> UncheckedSigned[Any, Any]:
        if isinstance(self, Complete):
            return self.multisigned.unchecked
        if isinstance(self, Incomplete):
            return self.unchecked
        raise TypeError("unknown partial multisignature state")

    def add_signature(
        self, signed: Signed[Indexed[Any]], keychain: MultiKeychain
    ) -> "PartiallyMultisigned":
        """Add a signature and check whether the multisignature became complete."""
        if signable_hash(self.as_signable()) != signable_hash(signed.as_signable()):
            logger.warning("Tried to add a signature of a different object")
            return self
        if not isinstance(self, Incomplete):
            return self
        signature = self.unchecked.signature.add_signature(
            signed.unchecked.signature, signed.unchecked.signable.index()
        )
        unchecked = UncheckedSigned(self.unchecked.signable, signature)
        if keychain.is_complete(signable_hash(unchecked.signable), unchecked.signature):
            return Complete(Multisigned(unchecked))
        return Incomplete(unchecked)


@dataclass(frozen=True)
class Incomplete(PartiallyMultisigned):
    """A partial multisignature without enough signatures yet."""

    unchecked: UncheckedSigned[Any, Any]


@dataclass(frozen=True)
class Complete(PartiallyMultisigned):
    """A partial multisignature that has become complete."""

    multisigned: Multisigned[Any]


PartialState = Union[Incomplete, Complete]


class IncompleteMultisignatureError(Exception):
    """A multisignature was required to be complete but was not."""

    def __init__(self, partial: PartiallyMultisigned) -> None:
        super().__init__("multisignature is incomplete")
        self.partial = partial