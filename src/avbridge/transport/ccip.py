"""Chainlink CCIP transport.

Uses quoteSendFeeWithCCIP / sendWithCCIP on the bridge contract. CCIP takes
no extra options; the destination is a uint64 chain selector.

Underfunded policy: a send is underfunded when the router reverts with
InsufficientFeeTokenAmount.
"""

from web3 import Web3

from avbridge.dispatch.errors import ContractRevert
from avbridge.dispatch.models import DispatchIntent, ExecutionOptions, TransportKind
from avbridge.transport.base import TransportAdapter, matches_error

UNDERFUNDED_ERRORS = {
    bytes(Web3.keccak(text="InsufficientFeeTokenAmount()")[:4]): "InsufficientFeeTokenAmount",
}


class CCIPTransport(TransportAdapter):
    """Secondary transport over Chainlink CCIP."""

    kind = TransportKind.SECONDARY
    quote_function = "quoteSendFeeWithCCIP"
    send_function = "sendWithCCIP"

    def build_args(self, intent: DispatchIntent, options: ExecutionOptions) -> tuple:
        return (
            intent.destination_id,
            intent.recipient_address,
            intent.amount,
            intent.use_alternate_path,
        )

    def is_underfunded(self, revert: ContractRevert) -> bool:
        return matches_error(revert, UNDERFUNDED_ERRORS) is not None
