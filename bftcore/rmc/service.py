"""Reliable multicast of hashes, yielding multisigned hashes once enough nodes sign."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..signature import Multisigned
from .handler import (
    Handler,
    MultisignedHashResponse,
    RmcError,
    SignedHashResponse,
)
from .message import Message, MultisignedHash, SignedHash
from .scheduler import TaskScheduler

logger = logging.getLogger("bftcore.rmc")


class Service:
    """Reliably broadcasts hashes and collects their multisignatures.

    A node starts broadcasting a hash with :meth:`start_rmc`, obtains messages to
    send with :meth:`next_message`, and feeds received messages to
    :meth:`process_message`, which returns the multisigned hash once it completes.
    """

    def __init__(self, scheduler: TaskScheduler[Message], handler: Handler) -> None:
        self._scheduler = scheduler
        self._handler = handler

    def start_rmc(self, hash: Any) -> Optional[Multisigned[Any]]:
        """Sign ``hash`` and schedule broadcasts; return the multisignature if it completed."""
        logger.debug("starting rmc for %r", hash)
        response = self._handler.on_start_rmc(hash)
        if isinstance(response, SignedHashResponse):
            self._scheduler.add_task(SignedHash(response.signed.into_unchecked()))
        elif isinstance(response, MultisignedHashResponse):
            self._scheduler.add_task(MultisignedHash(response.multisigned.into_unchecked()))
            return response.multisigned
        return None

    def process_message(self, message: Message) -> Optional[Multisigned[Any]]:
        """Handle a received message; return a multisigned hash not seen complete before."""
        if isinstance(message, SignedHash):
            try:
                multisigned = self._handler.on_signed_hash(message.unchecked)
            except RmcError as error:
                logger.warning("failed handling signed hash: %s", error)
                return None
        elif isinstance(message, MultisignedHash):
            try:
                multisigned = self._handler.on_multisigned_hash(message.unchecked)
            except RmcError as error:
                logger.warning("failed handling multisigned hash: %s", error)
                return None
        else:
            raise TypeError(f"unknown message kind {type(message).__name__}")
        if multisigned is None:
            return None
        self._scheduler.add_task(MultisignedHash(multisigned.into_unchecked()))
        return multisigned

    async def next_message(self) -> Message:
        """The next message scheduled for broadcast."""
        return await self._scheduler.next_task()