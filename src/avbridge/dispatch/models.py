"""Data model for a single dispatch run."""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from web3 import Web3

from avbridge.dispatch.errors import InvalidIntent

UINT256_LIMIT = 2**256
EVM_ADDRESS_LENGTH = 20
RECIPIENT_LENGTHS = (20, 32)


class TransportKind(str, Enum):
    """Cross-chain messaging protocol used for a dispatch."""
    PRIMARY = "layerzero"     # LayerZero V2
    SECONDARY = "ccip"        # Chainlink CCIP

    @property
    def destination_bits(self) -> int:
        """Bit width of the destination identifier for this protocol."""
        # LayerZero endpoint ids are uint32, CCIP chain selectors uint64
        return 32 if self is TransportKind.PRIMARY else 64

    @property
    def label(self) -> str:
        return "LayerZero" if self is TransportKind.PRIMARY else "CCIP"

    @classmethod
    def parse(cls, value: str) -> "TransportKind":
        """Parse a transport from its value or name (case-insensitive)."""
        lowered = value.strip().lower()
        for kind in cls:
            if lowered in (kind.value, kind.name.lower()):
                return kind
        raise InvalidIntent(f"Unknown transport: {value}")


def _coerce_recipient(recipient: Union[bytes, str]) -> bytes:
    if isinstance(recipient, str):
        text = recipient[2:] if recipient.startswith(("0x", "0X")) else recipient
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise InvalidIntent(f"Recipient is not valid hex: {recipient}")
    if isinstance(recipient, (bytes, bytearray)):
        return bytes(recipient)
    raise InvalidIntent(f"Recipient must be bytes or hex string, got {type(recipient).__name__}")


@dataclass(frozen=True)
class DispatchIntent:
    """What to send and where.

    Attributes:
        destination_id: LayerZero endpoint id or CCIP chain selector
        recipient: 20-byte address or 32-byte left-padded address
        amount: Token amount in base units (wei)
        use_alternate_path: Sub-route flag forwarded to the bridge contract
    """
    destination_id: int
    recipient: bytes
    amount: int
    use_alternate_path: bool = False

    def __post_init__(self):
        object.__setattr__(self, "recipient", _coerce_recipient(self.recipient))
        self.validate()

    def validate(self) -> None:
        """Check all intent invariants, raising InvalidIntent on violation."""
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidIntent(f"Amount must be an integer, got {type(self.amount).__name__}")
        if self.amount <= 0:
            raise InvalidIntent("Amount must be greater than zero")
        if self.amount >= UINT256_LIMIT:
            raise InvalidIntent("Amount does not fit in uint256")

        if isinstance(self.destination_id, bool) or not isinstance(self.destination_id, int):
            raise InvalidIntent("Destination id must be an integer")
        if self.destination_id <= 0 or self.destination_id >= 2**64:
            raise InvalidIntent(f"Destination id out of range: {self.destination_id}")

        if len(self.recipient) not in RECIPIENT_LENGTHS:
            raise InvalidIntent(
                f"Recipient must be 20 or 32 bytes, got {len(self.recipient)}"
            )
        if len(self.recipient) == 32 and any(self.recipient[:12]):
            raise InvalidIntent("32-byte recipient is not a padded EVM address")
        if not any(self.recipient):
            raise InvalidIntent("Recipient is the zero address")

    @property
    def recipient_address(self) -> str:
        """Recipient as a checksummed EVM address."""
        return Web3.to_checksum_address("0x" + self.recipient[-EVM_ADDRESS_LENGTH:].hex())


@dataclass(frozen=True)
class ExecutionOptions:
    """Protocol execution parameters for one dispatch.

    native_value is the value attached to the source transaction; it starts
    at 0 and is set from the fee quote right before sending.
    """
    gas_limit: int
    native_value: int = 0
    extra_options: bytes = b""

    def __post_init__(self):
        if self.gas_limit <= 0:
            raise InvalidIntent(f"Gas limit must be positive, got {self.gas_limit}")
        if self.native_value < 0:
            raise InvalidIntent(f"Native value must not be negative, got {self.native_value}")

    def with_native_value(self, value: int) -> "ExecutionOptions":
        return replace(self, native_value=value)


@dataclass(frozen=True)
class FeeQuote:
    """Advisory fee in native wei, read at block observed_at."""
    amount: int
    observed_at: int
    transport: TransportKind
    quoted_at: float = field(default_factory=time.time, compare=False)


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass(frozen=True)
class Receipt:
    """Terminal outcome of a submitted transaction."""
    status: ReceiptStatus
    block_number: int
    tx_hash: str
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is ReceiptStatus.SUCCESS


@dataclass(frozen=True)
class DispatchResult:
    """Final artifact of one dispatch run."""
    transport: TransportKind
    quote: FeeQuote
    receipt: Receipt

    @property
    def fee(self) -> int:
        return self.quote.amount

    @property
    def tx_hash(self) -> str:
        return self.receipt.tx_hash

    @property
    def succeeded(self) -> bool:
        return self.receipt.succeeded

    def to_dict(self) -> dict:
        """Convert to dictionary for display or storage."""
        return {
            "transport": self.transport.value,
            "fee": str(self.quote.amount),
            "quote_block": self.quote.observed_at,
            "tx_hash": self.receipt.tx_hash,
            "status": self.receipt.status.value,
            "block_number": self.receipt.block_number,
            "gas_used": self.receipt.gas_used,
        }
