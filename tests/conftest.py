"""Pytest configuration and fixtures."""

import os
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["DEBUG"] = "false"
os.environ.pop("PRIVATE_KEY", None)

from avbridge.config import get_settings
from avbridge.dispatch.confirmation import ConfirmationWaiter, TransactionHandle
from avbridge.dispatch.models import (
    DispatchIntent,
    FeeQuote,
    Receipt,
    ReceiptStatus,
    TransportKind,
)

RECIPIENT = "0x19596e1D6cd97916514B5DBaA4730781eFE49975"
OP_SEPOLIA_EID = 40232
OP_SEPOLIA_SELECTOR = 5224473277236331295


class FakeHandle(TransactionHandle):
    """Handle whose receipt appears once `ready` is set."""

    def __init__(
        self,
        tx_hash: str = "0x" + "ab" * 32,
        status: ReceiptStatus = ReceiptStatus.SUCCESS,
        ready: bool = True,
        block: int = 100,
    ):
        super().__init__(tx_hash)
        self.status = status
        self.ready = ready
        self.block = block
        self.head = block
        self.polls = 0

    async def fetch_receipt(self) -> Optional[Receipt]:
        self.polls += 1
        if not self.ready:
            return None
        return Receipt(status=self.status, block_number=self.block, tx_hash=self.tx_hash, gas_used=21000)

    async def block_number(self) -> int:
        return self.head


def make_quote(amount: int, transport: TransportKind = TransportKind.SECONDARY, block: int = 99) -> FeeQuote:
    return FeeQuote(amount=amount, observed_at=block, transport=transport)


def make_adapter(kind: TransportKind, quotes: list, send_results: list) -> MagicMock:
    """Mock adapter with scripted quote and send outcomes."""
    adapter = MagicMock()
    adapter.kind = kind
    adapter.name = kind.label
    adapter.quote = AsyncMock(side_effect=quotes)
    adapter.send = AsyncMock(side_effect=send_results)
    return adapter


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def intent() -> DispatchIntent:
    return DispatchIntent(
        destination_id=OP_SEPOLIA_EID,
        recipient=RECIPIENT,
        amount=25 * 10**18,
        use_alternate_path=True,
    )


@pytest.fixture
def ccip_intent() -> DispatchIntent:
    return DispatchIntent(
        destination_id=OP_SEPOLIA_SELECTOR,
        recipient=RECIPIENT,
        amount=15 * 10**18,
        use_alternate_path=True,
    )


@pytest.fixture
def fast_waiter() -> ConfirmationWaiter:
    return ConfirmationWaiter(poll_interval=0.01, default_timeout=1.0)
