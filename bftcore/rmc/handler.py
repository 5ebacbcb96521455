"""State of reliable multicast: collecting signatures into multisignatures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..signature import (
    Complete,
    Indexed,
    MultiKeychain,
    Multisigned,
    PartiallyMultisigned,
    SignatureError,
    Signed,
    UncheckedSigned,
)


class RmcError(Exception):
    """A message of reliable multicast was rejected."""


class BadSignatureError(RmcError):
    """A signed hash did not verify."""

    def __init__(self) -> None:
        super().__init__("received a hash with a bad signature.")


class BadMultisignatureError(RmcError):
    """A multisigned hash did not verify or was incomplete."""

    def __init__(self) -> None:
        super().__init__("received a hash with a bad multisignature.")


class OnStartRmcResponse:
    """The outcome of starting multicast of a hash."""


@dataclass(frozen=True)
class SignedHashResponse(OnStartRmcResponse):
    """Our signature did not complete the multisignature; broadcast it."""

    signed: Signed[Indexed[Any]]


@dataclass(frozen=True)
class MultisignedHashResponse(OnStartRmcResponse):
    """Our signature completed the multisignature."""

    multisigned: Multisigned[Any]


@dataclass(frozen=True)
class NoopResponse(OnStartRmcResponse):
    """The multisignature was already complete."""


class Handler:
    """Tracks partial multisignatures of hashes and reports when they complete."""

    def __init__(self, keychain: MultiKeychain) -> None:
        self._keychain = keychain
        self._hash_states: Dict[Any, PartiallyMultisigned] = {}

    def on_start_rmc(self, hash: Any) -> OnStartRmcResponse:
        """Sign ``hash`` and record the signature; call at most once per hash."""
        signed = Signed.sign_with_index(hash, self._keychain)
        if self._already_completed(signed.as_signable().as_signable()):
            return NoopResponse()
        multisigned = self._handle_signed_hash(signed)
        if multisigned is not None:
            return MultisignedHashResponse(multisigned)
        return SignedHashResponse(signed)

    def on_signed_hash(
        self, unchecked: UncheckedSigned[Indexed[Any], Any]
    ) -> Optional[Multisigned[Any]]:
        """Record a signed hash; return the multisigned hash if it just became complete.

        Raises :class:`BadSignatureError` if the signature does not verify.
        """
        try:
            signed = unchecked.check(self._keychain)
        except SignatureError as error:
            raise BadSignatureError() from error
        if self._already_completed(signed.as_signable().as_signable()):
            return None
        return self._handle_signed_hash(signed)

    def on_multisigned_hash(
        self, unchecked: UncheckedSigned[Any, Any]
    ) -> Optional[Multisigned[Any]]:
        """Record a multisigned hash; return it unless it was complete already.

        Raises :class:`BadMultisignatureError` if the multisignature is invalid.
        """
        if self._already_completed(unchecked.as_signable()):
            return None
        try:
            multisigned = unchecked.check_multi(self._keychain)
        except SignatureError as error:
            raise BadMultisignatureError() from error
        self._hash_states[multisigned.as_signable()] = Complete(multisigned)
        return multisigned

    def _handle_signed_hash(self, signed: Signed[Indexed[Any]]) -> Optional[Multisigned[Any]]:
        hash = signed.as_signable().as_signable()
        previous = self._hash_states.pop(hash, None)
        if previous is None:
            state = signed.into_partially_multisigned(self._keychain)
        else:
            state = previous.add_signature(signed, self._keychain)
        self._hash_states[hash] = state
        if isinstance(state, Complete):
            return state.multisigned
        return None

    def _already_completed(self, hash: Any) -> bool:
        return isinstance(self._hash_states.get(hash), Complete)