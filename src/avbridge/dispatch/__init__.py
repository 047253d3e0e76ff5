"""Protocol-agnostic dispatch lifecycle."""

from avbridge.dispatch.confirmation import ConfirmationWaiter, TransactionHandle
from avbridge.dispatch.errors import (
    BridgeError,
    ConfirmationTimeout,
    InvalidIntent,
    QuoteUnavailable,
    SendRejected,
    SendUnderfunded,
    ZeroQuote,
)
from avbridge.dispatch.models import (
    DispatchIntent,
    DispatchResult,
    ExecutionOptions,
    FeeQuote,
    Receipt,
    ReceiptStatus,
    TransportKind,
)
from avbridge.dispatch.options import OptionsBuilder, encode_lz_receive_options
from avbridge.dispatch.orchestrator import BridgeOrchestrator

__all__ = [
    # Models
    "DispatchIntent",
    "DispatchResult",
    "ExecutionOptions",
    "FeeQuote",
    "Receipt",
    "ReceiptStatus",
    "TransportKind",
    # Errors
    "BridgeError",
    "InvalidIntent",
    "QuoteUnavailable",
    "ZeroQuote",
    "SendRejected",
    "SendUnderfunded",
    "ConfirmationTimeout",
    # Components
    "OptionsBuilder",
    "encode_lz_receive_options",
    "ConfirmationWaiter",
    "TransactionHandle",
    "BridgeOrchestrator",
]
