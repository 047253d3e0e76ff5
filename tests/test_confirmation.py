"""Tests for confirmation waiting."""

from typing import Optional

import pytest

from avbridge.dispatch.confirmation import ConfirmationWaiter
from avbridge.dispatch.errors import ConfirmationTimeout, RemoteCallError
from avbridge.dispatch.models import Receipt, ReceiptStatus
from avbridge.transport.simulated import SimulatedBridge

from conftest import FakeHandle


class FlakyHandle(FakeHandle):
    """Handle whose first receipt lookup fails at the RPC level."""

    async def fetch_receipt(self) -> Optional[Receipt]:
        if self.polls == 0:
            self.polls += 1
            raise RemoteCallError("connection reset")
        return await super().fetch_receipt()


class TestConfirmationWaiter:
    """Tests for ConfirmationWaiter."""

    @pytest.mark.asyncio
    async def test_returns_success_receipt(self, fast_waiter):
        handle = FakeHandle()

        receipt = await fast_waiter.wait(handle)

        assert receipt.status is ReceiptStatus.SUCCESS
        assert receipt.tx_hash == handle.tx_hash

    @pytest.mark.asyncio
    async def test_reverted_is_returned_not_raised(self, fast_waiter):
        handle = FakeHandle(status=ReceiptStatus.REVERTED)

        receipt = await fast_waiter.wait(handle)

        assert receipt.status is ReceiptStatus.REVERTED
        assert receipt.succeeded is False

    @pytest.mark.asyncio
    async def test_waits_through_pending_polls(self, fast_waiter):
        bridge = SimulatedBridge(confirm_after_polls=3)
        handle = await bridge.submit("sendWithCCIP", (), bridge.fees["quoteSendFeeWithCCIP"])

        receipt = await fast_waiter.wait(handle)

        assert receipt.succeeded
        assert receipt.block_number == bridge.block

    @pytest.mark.asyncio
    async def test_timeout_then_rewait_same_handle(self, fast_waiter):
        handle = FakeHandle(ready=False)

        with pytest.raises(ConfirmationTimeout) as exc_info:
            await fast_waiter.wait(handle, timeout=0.05)

        assert exc_info.value.handle is handle
        assert exc_info.value.timeout == 0.05

        handle.ready = True
        receipt = await exc_info.value.handle.wait(timeout=0.5, waiter=fast_waiter)

        assert receipt.succeeded

    @pytest.mark.asyncio
    async def test_requires_confirmations(self):
        waiter = ConfirmationWaiter(poll_interval=0.01, confirmations=3)
        handle = FakeHandle(block=100)
        handle.head = 101

        with pytest.raises(ConfirmationTimeout):
            await waiter.wait(handle, timeout=0.05)

        handle.head = 102
        receipt = await waiter.wait(handle, timeout=0.5)

        assert receipt.block_number == 100

    @pytest.mark.asyncio
    async def test_rpc_error_while_polling_is_retried(self, fast_waiter):
        handle = FlakyHandle()

        receipt = await fast_waiter.wait(handle)

        assert receipt.succeeded
        assert handle.polls == 2

    @pytest.mark.asyncio
    async def test_zero_timeout_still_polls_once(self, fast_waiter):
        handle = FakeHandle()

        receipt = await fast_waiter.wait(handle, timeout=0)

        assert receipt.succeeded
