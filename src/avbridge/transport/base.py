"""Transport adapter interface.

A transport adapter wraps one messaging protocol exposed by the bridge
contract. Each protocol has a fee view function and a payable send function
that share the same argument shape:

    (destinationId, to, amount, useAlternatePath[, extraOptions])

Adapters translate intents into that argument tuple and translate remote
failures into dispatch errors. Nothing outside the adapter branches on the
protocol.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from avbridge.dispatch.confirmation import TransactionHandle
from avbridge.dispatch.errors import (
    ContractRevert,
    QuoteUnavailable,
    RemoteCallError,
    SendRejected,
    SendUnderfunded,
)
from avbridge.dispatch.models import (
    DispatchIntent,
    ExecutionOptions,
    FeeQuote,
    TransportKind,
)

logger = logging.getLogger(__name__)


class RemoteBridge(ABC):
    """Remote callable surface of the bridge contract."""

    @abstractmethod
    async def call_fee(self, function: str, args: tuple) -> tuple[int, int]:
        """Call a fee view function.

        Args:
            function: Contract function name
            args: Positional arguments

        Returns:
            Tuple of (fee in wei, block number the call was made at)

        Raises:
            ContractRevert: If the call reverts
            RemoteCallError: On RPC failure
        """
        pass

    @abstractmethod
    async def submit(self, function: str, args: tuple, value: int) -> TransactionHandle:
        """Sign and broadcast a payable call with value attached.

        Raises:
            ContractRevert: If submission reverts (including gas estimation)
            RemoteCallError: On RPC or signing failure
        """
        pass


class TransportAdapter(ABC):
    """Uniform quote/send capability over one messaging protocol."""

    kind: TransportKind

    # Contract function names, set by each protocol
    quote_function: str
    send_function: str

    def __init__(self, remote: RemoteBridge):
        self.remote = remote

    @property
    def name(self) -> str:
        return self.kind.label

    @abstractmethod
    def build_args(self, intent: DispatchIntent, options: ExecutionOptions) -> tuple:
        """Build the contract argument tuple shared by quote and send."""
        pass

    @abstractmethod
    def is_underfunded(self, revert: ContractRevert) -> bool:
        """Decide whether a send revert means the attached fee was too low."""
        pass

    async def quote(self, intent: DispatchIntent, options: ExecutionOptions) -> FeeQuote:
        """Get the fee for delivering the intent.

        Raises:
            QuoteUnavailable: If the fee view call fails or reverts
        """
        args = self.build_args(intent, options)
        logger.debug(f"{self.name}: {self.quote_function}{args}")

        try:
            fee, block = await self.remote.call_fee(self.quote_function, args)
        except ContractRevert as e:
            logger.error(f"{self.name} quote reverted: {e.reason}")
            raise QuoteUnavailable(self.name, f"reverted: {e.reason}") from e
        except RemoteCallError as e:
            logger.error(f"{self.name} quote failed: {e}")
            raise QuoteUnavailable(self.name, str(e)) from e

        logger.info(f"{self.name} fee for destination {intent.destination_id}: {fee} wei (block {block})")
        return FeeQuote(amount=fee, observed_at=block, transport=self.kind)

    async def send(
        self,
        intent: DispatchIntent,
        options: ExecutionOptions,
        value: FeeQuote,
    ) -> TransactionHandle:
        """Submit the send transaction with the quoted fee attached.

        Raises:
            SendUnderfunded: If the protocol rejects the fee as too low
            SendRejected: If submission reverts for any other reason
        """
        args = self.build_args(intent, options)
        logger.info(
            f"{self.name}: {self.send_function} {intent.amount} to {intent.recipient_address} "
            f"on {intent.destination_id} with value {value.amount}"
        )

        try:
            handle = await self.remote.submit(self.send_function, args, value.amount)
        except ContractRevert as e:
            if self.is_underfunded(e):
                logger.warning(f"{self.name} send underfunded: {e.reason}")
                raise SendUnderfunded(self.name, value.amount, e.reason) from e
            logger.error(f"{self.name} send reverted: {e.reason}")
            raise SendRejected(self.name, e.reason, e.data) from e
        except RemoteCallError as e:
            logger.error(f"{self.name} send failed: {e}")
            raise SendRejected(self.name, str(e)) from e

        logger.info(f"{self.name} transaction submitted: {handle.tx_hash}")
        return handle

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(remote={self.remote!r})"


def matches_error(revert: ContractRevert, signatures: dict[bytes, str]) -> Optional[str]:
    """Match a revert against known custom errors by selector or name.

    Args:
        revert: The contract revert
        signatures: Map of 4-byte selector -> error name

    Returns:
        Matched error name, or None
    """
    selector = revert.selector
    if selector is not None and selector in signatures:
        return signatures[selector]
    for name in signatures.values():
        if name in (revert.reason or ""):
            return name
    return None
