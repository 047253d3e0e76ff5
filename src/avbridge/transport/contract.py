"""Bridge contract access over web3.py.

Fee reads are pinned to the current block so the quote carries the block it
was observed at. Sends are built, signed locally with eth-account and
broadcast as raw transactions. web3's HTTP provider is blocking, so every
call runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, Optional

from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TransactionNotFound

from avbridge.dispatch.confirmation import TransactionHandle
from avbridge.dispatch.errors import ContractRevert, InvalidIntent, RemoteCallError
from avbridge.dispatch.models import Receipt, ReceiptStatus
from avbridge.transport.base import RemoteBridge

logger = logging.getLogger(__name__)


def _bridge_function(name: str, with_options: bool, payable: bool) -> dict:
    inputs = [
        {"name": "_destination", "type": "uint32" if with_options else "uint64"},
        {"name": "_to", "type": "address"},
        {"name": "_amount", "type": "uint256"},
        {"name": "_useAlternatePath", "type": "bool"},
    ]
    if with_options:
        inputs.append({"name": "_options", "type": "bytes"})
    return {
        "name": name,
        "type": "function",
        "inputs": inputs,
        "outputs": [] if payable else [{"name": "", "type": "uint256"}],
        "stateMutability": "payable" if payable else "view",
    }


# AvUSDBridging quote/send entry points
BRIDGE_ABI = [
    _bridge_function("quoteSendFeeWithLayerzero", with_options=True, payable=False),
    _bridge_function("sendWithLayerzero", with_options=True, payable=True),
    _bridge_function("quoteSendFeeWithCCIP", with_options=False, payable=False),
    _bridge_function("sendWithCCIP", with_options=False, payable=True),
]


def _revert_from(error: ContractLogicError) -> ContractRevert:
    """Translate a web3 contract error, keeping raw revert data."""
    reason = getattr(error, "message", None) or str(error)
    data = getattr(error, "data", None)
    if isinstance(data, dict):
        data = data.get("data")
    if data is not None and not isinstance(data, str):
        data = Web3.to_hex(data)
    return ContractRevert(reason, data)


class Web3BridgeContract(RemoteBridge):
    """AvUSDBridging contract reached through a JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        address: str,
        private_key: Optional[str] = None,
        chain_id: Optional[int] = None,
        request_timeout: float = 30.0,
    ):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.request_timeout = request_timeout

        try:
            self.address = Web3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise InvalidIntent(f"Invalid bridge address: {address}") from e

        try:
            self._account = Account.from_key(private_key) if private_key else None
        except (ValueError, TypeError) as e:
            # Never echo the key
            raise InvalidIntent("Invalid private key") from e
        self._web3: Optional[Web3] = None

    @property
    def web3(self) -> Web3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = Web3(
                Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.request_timeout})
            )
        return self._web3

    @property
    def sender(self) -> Optional[str]:
        return self._account.address if self._account else None

    def _function(self, function: str, args: tuple) -> Any:
        contract = self.web3.eth.contract(address=self.address, abi=BRIDGE_ABI)
        return getattr(contract.functions, function)(*args)

    async def call_fee(self, function: str, args: tuple) -> tuple[int, int]:
        def _call() -> tuple[int, int]:
            block = self.web3.eth.block_number
            fee = self._function(function, args).call(block_identifier=block)
            return int(fee), block

        try:
            return await asyncio.to_thread(_call)
        except ContractLogicError as e:
            raise _revert_from(e) from e
        except Exception as e:
            raise RemoteCallError(f"{function} call failed: {type(e).__name__}: {e}") from e

    async def submit(self, function: str, args: tuple, value: int) -> TransactionHandle:
        """Build, sign and broadcast a payable bridge call.

        The nonce is read as the pending transaction count on every call and
        is not reserved. Concurrent submits from the same signer can pick the
        same nonce, in which case the later broadcast fails and surfaces as
        RemoteCallError.
        """
        if self._account is None:
            raise RemoteCallError("No signing key configured")

        account = self._account

        def _send() -> str:
            w3 = self.web3
            tx = self._function(function, args).build_transaction({
                "from": account.address,
                "value": value,
                "nonce": w3.eth.get_transaction_count(account.address, "pending"),
                "chainId": self.chain_id or w3.eth.chain_id,
            })
            signed = account.sign_transaction(tx)
            tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
            return Web3.to_hex(tx_hash)

        try:
            tx_hash = await asyncio.to_thread(_send)
        except ContractLogicError as e:
            raise _revert_from(e) from e
        except Exception as e:
            raise RemoteCallError(f"{function} submission failed: {type(e).__name__}: {e}") from e

        return Web3TransactionHandle(tx_hash, self)

    def __repr__(self) -> str:
        return f"Web3BridgeContract(address={self.address}, rpc={self.rpc_url})"


class Web3TransactionHandle(TransactionHandle):
    """Handle polling eth_getTransactionReceipt."""

    def __init__(self, tx_hash: str, bridge: Web3BridgeContract):
        super().__init__(tx_hash)
        self.bridge = bridge

    async def fetch_receipt(self) -> Optional[Receipt]:
        try:
            raw = await asyncio.to_thread(self.bridge.web3.eth.get_transaction_receipt, self.tx_hash)
        except TransactionNotFound:
            return None
        except Exception as e:
            raise RemoteCallError(f"Receipt lookup failed: {e}") from e

        if raw is None:
            return None

        try:
            status = ReceiptStatus.SUCCESS if raw["status"] == 1 else ReceiptStatus.REVERTED
            block_number = raw["blockNumber"]
        except KeyError as e:
            raise RemoteCallError(f"Malformed receipt for {self.tx_hash}: missing {e}") from e

        return Receipt(
            status=status,
            block_number=block_number,
            tx_hash=self.tx_hash,
            gas_used=raw.get("gasUsed", 0),
        )

    async def block_number(self) -> int:
        try:
            return await asyncio.to_thread(lambda: self.bridge.web3.eth.block_number)
        except Exception as e:
            raise RemoteCallError(f"Block number lookup failed: {e}") from e
