"""Quote-then-send orchestration.

Dispatch lifecycle:
1. Validate the intent (no adapter is contacted for an invalid intent)
2. Build execution options for the transport
3. Quote the fee; a zero fee means the route is unsupported
4. Attach exactly the quoted fee as the transaction value
5. Send; if the protocol reports the fee as too low, re-quote and resend once
6. Wait for a terminal receipt
7. Return the DispatchResult

Nothing is cached between dispatches. Each call owns its intent, options and
quote, so concurrent dispatches share no mutable state.
"""

import logging
from typing import TYPE_CHECKING, Optional

from avbridge.dispatch.confirmation import ConfirmationWaiter, TransactionHandle
from avbridge.dispatch.errors import InvalidIntent, SendUnderfunded, ZeroQuote
from avbridge.dispatch.models import (
    DispatchIntent,
    DispatchResult,
    ExecutionOptions,
    FeeQuote,
    TransportKind,
)
from avbridge.dispatch.options import OptionsBuilder

if TYPE_CHECKING:
    from avbridge.transport.base import TransportAdapter

logger = logging.getLogger(__name__)

# Resends allowed after an underfunded send
MAX_UNDERFUNDED_RETRIES = 1


class BridgeOrchestrator:
    """Drives one intent through a selected transport."""

    def __init__(
        self,
        adapters: dict[TransportKind, "TransportAdapter"],
        options_builder: Optional[OptionsBuilder] = None,
        waiter: Optional[ConfirmationWaiter] = None,
        confirmation_timeout: Optional[float] = None,
    ):
        """Initialize the orchestrator.

        Args:
            adapters: Transport adapters keyed by kind
            options_builder: Builder for execution options
            waiter: Confirmation waiter for submitted transactions
            confirmation_timeout: Seconds to wait for a receipt
                (defaults to the waiter's default)
        """
        self.adapters = dict(adapters)
        self.options_builder = options_builder or OptionsBuilder()
        self.waiter = waiter or ConfirmationWaiter()
        self.confirmation_timeout = confirmation_timeout

    def get_adapter(self, transport: TransportKind) -> "TransportAdapter":
        adapter = self.adapters.get(transport)
        if adapter is None:
            raise InvalidIntent(f"Transport {transport.value} is not configured")
        return adapter

    def validate(self, intent: DispatchIntent, transport: TransportKind) -> None:
        """Validate an intent for a transport without touching any adapter."""
        if not isinstance(intent, DispatchIntent):
            raise InvalidIntent(f"Expected DispatchIntent, got {type(intent).__name__}")
        if not isinstance(transport, TransportKind):
            raise InvalidIntent(f"Unknown transport: {transport!r}")

        intent.validate()

        if intent.destination_id >= 2**transport.destination_bits:
            raise InvalidIntent(
                f"Destination {intent.destination_id} does not fit "
                f"{transport.label} (uint{transport.destination_bits})"
            )

        self.get_adapter(transport)

    async def quote(self, intent: DispatchIntent, transport: TransportKind) -> FeeQuote:
        """Quote the fee for an intent without sending anything."""
        self.validate(intent, transport)
        adapter = self.get_adapter(transport)
        options = self.options_builder.build(intent, transport)
        return await self._quote(adapter, intent, options)

    async def dispatch(self, intent: DispatchIntent, transport: TransportKind) -> DispatchResult:
        """Run the full quote-send-confirm lifecycle.

        Args:
            intent: What to send and where
            transport: Which messaging protocol to use

        Returns:
            DispatchResult with the quote that was paid and the receipt

        Raises:
            InvalidIntent, QuoteUnavailable, ZeroQuote, SendRejected,
            SendUnderfunded, ConfirmationTimeout
        """
        self.validate(intent, transport)
        adapter = self.get_adapter(transport)

        logger.info(
            f"Dispatching {intent.amount} to {intent.recipient_address} "
            f"via {transport.label} (destination {intent.destination_id})"
        )

        options = self.options_builder.build(intent, transport)
        quote, handle = await self._quote_and_send(adapter, intent, options)

        receipt = await self.waiter.wait(handle, self.confirmation_timeout)

        result = DispatchResult(transport=transport, quote=quote, receipt=receipt)
        logger.info(
            f"Dispatch finished: {transport.label} fee={quote.amount} "
            f"tx={receipt.tx_hash} status={receipt.status.value}"
        )
        return result

    async def _quote_and_send(
        self,
        adapter: "TransportAdapter",
        intent: DispatchIntent,
        options: ExecutionOptions,
    ) -> tuple[FeeQuote, TransactionHandle]:
        """Quote and send, re-quoting once if the send is underfunded."""
        attempt = 0
        while True:
            quote = await self._quote(adapter, intent, options)
            funded = options.with_native_value(quote.amount)

            try:
                handle = await adapter.send(intent, funded, quote)
                return quote, handle
            except SendUnderfunded as e:
                if attempt >= MAX_UNDERFUNDED_RETRIES:
                    logger.error(f"{adapter.name} send still underfunded after re-quote: {e}")
                    raise
                attempt += 1
                logger.warning(f"{adapter.name} send underfunded at {quote.amount} wei, re-quoting")

    async def _quote(
        self,
        adapter: "TransportAdapter",
        intent: DispatchIntent,
        options: ExecutionOptions,
    ) -> FeeQuote:
        quote = await adapter.quote(intent, options)
        if quote.amount == 0:
            logger.error(f"{adapter.name} returned zero quote for destination {intent.destination_id}")
            raise ZeroQuote(adapter.name, intent.destination_id)
        return quote
