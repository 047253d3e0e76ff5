"""Tests for the dispatch orchestrator."""

import asyncio

import pytest

from avbridge.dispatch.errors import (
    ConfirmationTimeout,
    InvalidIntent,
    QuoteUnavailable,
    SendRejected,
    SendUnderfunded,
    ZeroQuote,
)
from avbridge.dispatch.models import DispatchIntent, ReceiptStatus, TransportKind
from avbridge.dispatch.orchestrator import BridgeOrchestrator
from avbridge.transport.factory import create_transports
from avbridge.transport.simulated import SimulatedBridge

from conftest import RECIPIENT, FakeHandle, make_adapter, make_quote

SECONDARY = TransportKind.SECONDARY
PRIMARY = TransportKind.PRIMARY


def orchestrator_for(adapter, waiter, **kwargs) -> BridgeOrchestrator:
    return BridgeOrchestrator({adapter.kind: adapter}, waiter=waiter, **kwargs)


class TestDispatchScenarios:
    """End-to-end dispatch scenarios with scripted adapters."""

    @pytest.mark.asyncio
    async def test_happy_path(self, intent, fast_waiter):
        q = 3_141_592_653
        handle = FakeHandle()
        adapter = make_adapter(SECONDARY, [make_quote(q)], [handle])

        result = await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        assert result.transport is SECONDARY
        assert result.quote.amount == q
        assert result.receipt.status is ReceiptStatus.SUCCESS
        assert result.tx_hash == handle.tx_hash

        sent_intent, sent_options, sent_value = adapter.send.call_args.args
        assert sent_intent is intent
        assert sent_value.amount == q
        assert sent_options.native_value == q

    @pytest.mark.asyncio
    async def test_underfunded_then_success_uses_second_quote(self, intent, fast_waiter):
        q1, q2 = 1000, 1300
        adapter = make_adapter(
            SECONDARY,
            [make_quote(q1), make_quote(q2, block=100)],
            [SendUnderfunded("CCIP", q1), FakeHandle()],
        )

        result = await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        assert result.quote.amount == q2
        assert adapter.quote.await_count == 2
        assert adapter.send.await_count == 2
        first_options = adapter.send.await_args_list[0].args[1]
        second_options = adapter.send.await_args_list[1].args[1]
        assert first_options.native_value == q1
        assert second_options.native_value == q2

    @pytest.mark.asyncio
    async def test_underfunded_twice_is_terminal(self, intent, fast_waiter):
        adapter = make_adapter(
            SECONDARY,
            [make_quote(1000), make_quote(1100), make_quote(1200)],
            [SendUnderfunded("CCIP", 1000), SendUnderfunded("CCIP", 1100), FakeHandle()],
        )

        with pytest.raises(SendUnderfunded):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        # Never a third attempt
        assert adapter.send.await_count == 2
        assert adapter.quote.await_count == 2

    @pytest.mark.asyncio
    async def test_zero_quote_never_sends(self, intent, fast_waiter):
        adapter = make_adapter(SECONDARY, [make_quote(0)], [FakeHandle()])

        with pytest.raises(ZeroQuote):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        adapter.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_quote_on_requote(self, intent, fast_waiter):
        adapter = make_adapter(
            SECONDARY,
            [make_quote(1000), make_quote(0)],
            [SendUnderfunded("CCIP", 1000), FakeHandle()],
        )

        with pytest.raises(ZeroQuote):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        assert adapter.send.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_then_rewait(self, intent, fast_waiter):
        handle = FakeHandle(ready=False)
        adapter = make_adapter(SECONDARY, [make_quote(500)], [handle])
        orchestrator = orchestrator_for(adapter, fast_waiter, confirmation_timeout=0.05)

        with pytest.raises(ConfirmationTimeout) as exc_info:
            await orchestrator.dispatch(intent, SECONDARY)

        handle.ready = True
        receipt = await fast_waiter.wait(exc_info.value.handle)

        assert receipt.status is ReceiptStatus.SUCCESS
        assert adapter.send.await_count == 1

    @pytest.mark.asyncio
    async def test_reverted_receipt_is_a_result(self, intent, fast_waiter):
        adapter = make_adapter(SECONDARY, [make_quote(500)], [FakeHandle(status=ReceiptStatus.REVERTED)])

        result = await orchestrator_for(adapter, fast_waiter).dispatch(intent, SECONDARY)

        assert result.succeeded is False
        assert result.receipt.status is ReceiptStatus.REVERTED


class TestErrorPropagation:
    """Errors other than underfunding are never retried."""

    @pytest.mark.asyncio
    async def test_quote_unavailable_propagates(self, intent, fast_waiter):
        adapter = make_adapter(PRIMARY, [QuoteUnavailable("LayerZero", "reverted")], [])

        with pytest.raises(QuoteUnavailable):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, PRIMARY)

        assert adapter.quote.await_count == 1
        adapter.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_rejected_not_retried(self, intent, fast_waiter):
        adapter = make_adapter(PRIMARY, [make_quote(10, PRIMARY)], [SendRejected("LayerZero", "Paused")])

        with pytest.raises(SendRejected):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, PRIMARY)

        assert adapter.send.await_count == 1
        assert adapter.quote.await_count == 1


class TestValidation:
    """Invalid intents never reach an adapter."""

    @pytest.mark.asyncio
    async def test_zero_amount_never_reaches_adapter(self, fast_waiter):
        adapter = make_adapter(SECONDARY, [make_quote(1)], [FakeHandle()])
        orchestrator = orchestrator_for(adapter, fast_waiter)

        with pytest.raises(InvalidIntent):
            await orchestrator.dispatch(DispatchIntent(40232, RECIPIENT, 0), SECONDARY)

        assert adapter.quote.await_count == 0
        assert adapter.send.await_count == 0

    @pytest.mark.asyncio
    async def test_destination_too_wide_for_layerzero(self, fast_waiter):
        adapter = make_adapter(PRIMARY, [make_quote(1, PRIMARY)], [FakeHandle()])
        intent = DispatchIntent(5224473277236331295, RECIPIENT, 10)

        with pytest.raises(InvalidIntent, match="uint32"):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, PRIMARY)

        adapter.quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unconfigured_transport(self, intent, fast_waiter):
        adapter = make_adapter(SECONDARY, [make_quote(1)], [FakeHandle()])

        with pytest.raises(InvalidIntent, match="not configured"):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, PRIMARY)

    @pytest.mark.asyncio
    async def test_unknown_transport_value(self, intent, fast_waiter):
        adapter = make_adapter(SECONDARY, [make_quote(1)], [FakeHandle()])

        with pytest.raises(InvalidIntent):
            await orchestrator_for(adapter, fast_waiter).dispatch(intent, "ccip-v2")


class TestSimulatedDispatch:
    """Dispatches through real adapters over the simulated bridge."""

    @pytest.mark.asyncio
    async def test_both_transports(self, intent, ccip_intent, fast_waiter):
        bridge = SimulatedBridge(confirm_after_polls=2)
        orchestrator = BridgeOrchestrator(create_transports(remote=bridge), waiter=fast_waiter)

        lz = await orchestrator.dispatch(intent, PRIMARY)
        ccip = await orchestrator.dispatch(ccip_intent, SECONDARY)

        assert lz.fee == bridge.fees["quoteSendFeeWithLayerzero"]
        assert ccip.fee == bridge.fees["quoteSendFeeWithCCIP"]
        assert [s[0] for s in bridge.submissions] == ["sendWithLayerzero", "sendWithCCIP"]
        assert [s[2] for s in bridge.submissions] == [lz.fee, ccip.fee]

    @pytest.mark.asyncio
    async def test_concurrent_dispatches(self, fast_waiter):
        bridge = SimulatedBridge(confirm_after_polls=1)
        orchestrator = BridgeOrchestrator(create_transports(remote=bridge), waiter=fast_waiter)
        intents = [DispatchIntent(40232, RECIPIENT, amount) for amount in range(1, 6)]

        results = await asyncio.gather(*(orchestrator.dispatch(i, PRIMARY) for i in intents))

        assert len({r.tx_hash for r in results}) == 5
        assert sorted(s[1][2] for s in bridge.submissions) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_quote_only(self, ccip_intent, fast_waiter):
        bridge = SimulatedBridge()
        orchestrator = BridgeOrchestrator(create_transports(remote=bridge), waiter=fast_waiter)

        quote = await orchestrator.quote(ccip_intent, SECONDARY)

        assert quote.amount == bridge.fees["quoteSendFeeWithCCIP"]
        assert bridge.submissions == []
