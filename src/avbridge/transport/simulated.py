"""Simulated bridge contract for dry-run mode and testing.

Quotes come from a fixed fee table, sends below the required fee revert with
the protocol's insufficient-fee error, and transactions confirm after a
configurable number of receipt polls.
"""

import logging
import secrets
from typing import Optional

from web3 import Web3

from avbridge.dispatch.confirmation import TransactionHandle
from avbridge.dispatch.errors import ContractRevert
from avbridge.dispatch.models import Receipt, ReceiptStatus
from avbridge.transport.base import RemoteBridge

logger = logging.getLogger(__name__)

# Simulated fees in wei
DEFAULT_FEES = {
    "quoteSendFeeWithLayerzero": 1_250_000_000_000_000,   # 0.00125
    "quoteSendFeeWithCCIP": 2_400_000_000_000_000,        # 0.0024
}

SEND_TO_QUOTE = {
    "sendWithLayerzero": "quoteSendFeeWithLayerzero",
    "sendWithCCIP": "quoteSendFeeWithCCIP",
}

UNDERFUNDED_SIGNATURES = {
    "sendWithLayerzero": "LZ_InsufficientFee(uint256,uint256,uint256,uint256)",
    "sendWithCCIP": "InsufficientFeeTokenAmount()",
}


def _underfunded_revert(function: str, required: int, supplied: int) -> ContractRevert:
    signature = UNDERFUNDED_SIGNATURES[function]
    data = bytes(Web3.keccak(text=signature)[:4])
    if "uint256" in signature:
        data += required.to_bytes(32, "big") + supplied.to_bytes(32, "big") + bytes(64)
    name = signature.split("(")[0]
    return ContractRevert(f"execution reverted: {name}", "0x" + data.hex())


class SimulatedBridge(RemoteBridge):
    """In-memory stand-in for the bridge contract."""

    def __init__(
        self,
        fees: Optional[dict[str, int]] = None,
        required_fees: Optional[dict[str, int]] = None,
        confirm_after_polls: int = 1,
        revert_sends: bool = False,
        start_block: int = 1_000_000,
    ):
        """Initialize the simulated bridge.

        Args:
            fees: Fee returned per quote function
            required_fees: Minimum value accepted per quote function
                (defaults to the quoted fee)
            confirm_after_polls: Receipt polls before a tx is mined
            revert_sends: Mine every transaction as reverted
            start_block: Initial block height
        """
        self.fees = dict(DEFAULT_FEES)
        if fees:
            self.fees.update(fees)
        self.required_fees = dict(required_fees or {})
        self.confirm_after_polls = confirm_after_polls
        self.revert_sends = revert_sends
        self.block = start_block
        self.submissions: list[tuple[str, tuple, int]] = []

    async def call_fee(self, function: str, args: tuple) -> tuple[int, int]:
        if function not in self.fees:
            raise ContractRevert(f"execution reverted: unknown function {function}")
        return self.fees[function], self.block

    async def submit(self, function: str, args: tuple, value: int) -> TransactionHandle:
        quote_function = SEND_TO_QUOTE.get(function)
        if quote_function is None:
            raise ContractRevert(f"execution reverted: unknown function {function}")

        required = self.required_fees.get(quote_function, self.fees[quote_function])
        if value < required:
            raise _underfunded_revert(function, required, value)

        self.block += 1
        self.submissions.append((function, args, value))
        tx_hash = f"0x{secrets.token_hex(32)}"
        logger.info(f"[SIMULATED] {function} value={value} -> {tx_hash}")

        status = ReceiptStatus.REVERTED if self.revert_sends else ReceiptStatus.SUCCESS
        return SimulatedTransactionHandle(tx_hash, self, self.block, status, self.confirm_after_polls)

    def __repr__(self) -> str:
        return f"SimulatedBridge(block={self.block})"


class SimulatedTransactionHandle(TransactionHandle):
    """Transaction that is mined after a fixed number of polls."""

    def __init__(
        self,
        tx_hash: str,
        bridge: SimulatedBridge,
        mined_block: int,
        status: ReceiptStatus,
        pending_polls: int,
    ):
        super().__init__(tx_hash)
        self.bridge = bridge
        self.mined_block = mined_block
        self.status = status
        self.pending_polls = pending_polls

    async def fetch_receipt(self) -> Optional[Receipt]:
        if self.pending_polls > 0:
            self.pending_polls -= 1
            return None
        return Receipt(
            status=self.status,
            block_number=self.mined_block,
            tx_hash=self.tx_hash,
            gas_used=185_000,
        )

    async def block_number(self) -> int:
        # Chain advances one block per head lookup
        self.bridge.block += 1
        return self.bridge.block
