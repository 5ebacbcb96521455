"""Messages of reliable multicast: signed or multisigned hashes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..signature import UncheckedSigned


class Message:
    """Either a hash signed by one node or a multisigned hash."""

    def hash(self) -> Any:
        """The hash carried by the message."""
        if isinstance(self, SignedHash):
            return self.unchecked.as_signable_strip_index()
        if isinstance(self, MultisignedHash):
            return self.unchecked.as_signable()
        raise TypeError(f"unknown message kind {type(self).__name__}")

    def is_complete(self) -> bool:
        """Whether the message carries a complete multisignature."""
        return isinstance(self, MultisignedHash)


@dataclass(frozen=True)
class SignedHash(Message):
    """A hash signed by a single node, together with that node's index."""

    unchecked: UncheckedSigned[Any, Any]


@dataclass(frozen=True)
class MultisignedHash(Message):
    """A hash with a multisignature."""

    unchecked: UncheckedSigned[Any, Any]