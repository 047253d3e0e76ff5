"""Confirmation waiting for submitted transactions."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from avbridge.dispatch.errors import ConfirmationTimeout, RemoteCallError
from avbridge.dispatch.models import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 2.0


class TransactionHandle(ABC):
    """A submitted transaction that may not be final yet."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash

    @abstractmethod
    async def fetch_receipt(self) -> Optional[Receipt]:
        """Get the receipt, or None if the transaction is still pending."""
        pass

    @abstractmethod
    async def block_number(self) -> int:
        """Get the current head block of the chain the tx was sent to."""
        pass

    async def wait(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        waiter: Optional["ConfirmationWaiter"] = None,
    ) -> Receipt:
        """Wait for a terminal receipt. Safe to call again after a timeout."""
        waiter = waiter or ConfirmationWaiter()
        return await waiter.wait(self, timeout)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tx_hash={self.tx_hash})"


class ConfirmationWaiter:
    """Polls a transaction handle until it reaches a terminal state."""

    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        confirmations: int = 1,
        default_timeout: float = DEFAULT_TIMEOUT,
    ):
        self.poll_interval = poll_interval
        self.confirmations = max(1, confirmations)
        self.default_timeout = default_timeout

    async def wait(self, handle: TransactionHandle, timeout: Optional[float] = None) -> Receipt:
        """Wait for a transaction to be confirmed.

        Args:
            handle: Handle returned by a transport send
            timeout: Maximum seconds to wait (defaults to default_timeout)

        Returns:
            Receipt with SUCCESS or REVERTED status

        Raises:
            ConfirmationTimeout: If no terminal receipt within timeout
        """
        timeout = self.default_timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        logger.info(f"Waiting for {handle.tx_hash} (timeout {timeout}s, {self.confirmations} confirmation(s))")

        while True:
            receipt = await self._poll(handle)
            if receipt is not None:
                if receipt.succeeded:
                    logger.info(f"Transaction {handle.tx_hash} confirmed in block {receipt.block_number}")
                else:
                    logger.warning(f"Transaction {handle.tx_hash} reverted in block {receipt.block_number}")
                return receipt

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.error(f"Transaction {handle.tx_hash} not confirmed after {timeout}s")
                raise ConfirmationTimeout(handle, timeout)

            await asyncio.sleep(min(self.poll_interval, remaining))

    async def _poll(self, handle: TransactionHandle) -> Optional[Receipt]:
        """Return the receipt once it has enough confirmations."""
        try:
            receipt = await handle.fetch_receipt()
            if receipt is None:
                return None

            if self.confirmations > 1:
                head = await handle.block_number()
                confirms = head - receipt.block_number + 1
                if confirms < self.confirmations:
                    logger.debug(f"{handle.tx_hash}: {confirms}/{self.confirmations} confirmations")
                    return None

            return receipt

        except RemoteCallError as e:
            logger.warning(f"Error polling {handle.tx_hash}: {e}")
            return None
