"""LayerZero V2 transport.

Uses quoteSendFeeWithLayerzero / sendWithLayerzero on the bridge contract.
The executor options blob built by OptionsBuilder is passed as the fifth
argument.

Underfunded policy: a send is underfunded when it reverts with the endpoint's
LZ_InsufficientFee error or the OApp's NotEnoughNative error. Any other revert
is a plain rejection.
"""

import logging

from web3 import Web3

from avbridge.dispatch.errors import ContractRevert
from avbridge.dispatch.models import DispatchIntent, ExecutionOptions, TransportKind
from avbridge.transport.base import TransportAdapter, matches_error

logger = logging.getLogger(__name__)

UNDERFUNDED_ERRORS = {
    bytes(Web3.keccak(text="LZ_InsufficientFee(uint256,uint256,uint256,uint256)")[:4]): "LZ_InsufficientFee",
    bytes(Web3.keccak(text="NotEnoughNative(uint256)")[:4]): "NotEnoughNative",
}


class LayerZeroTransport(TransportAdapter):
    """Primary transport over LayerZero V2."""

    kind = TransportKind.PRIMARY
    quote_function = "quoteSendFeeWithLayerzero"
    send_function = "sendWithLayerzero"

    def build_args(self, intent: DispatchIntent, options: ExecutionOptions) -> tuple:
        return (
            intent.destination_id,
            intent.recipient_address,
            intent.amount,
            intent.use_alternate_path,
            options.extra_options,
        )

    def is_underfunded(self, revert: ContractRevert) -> bool:
        matched = matches_error(revert, UNDERFUNDED_ERRORS)
        if matched:
            logger.debug(f"LayerZero revert matched {matched}")
        return matched is not None
