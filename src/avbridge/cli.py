"""Command-line entry point for bridge dispatches.

Usage:
    avbridge send --transport ccip --to-network optimismSepolia \\
        --recipient 0x19596e1D6cd97916514B5DBaA4730781eFE49975 --amount 15 --alternate-path
    avbridge quote --transport layerzero --destination-id 40232 --recipient 0x... --amount 25
    avbridge options --gas 2000000
    avbridge networks

Environment variables:
    DRY_RUN: Use the simulated bridge (default: true)
    NETWORK: Source network name (default: avalancheFuji)
    PRIVATE_KEY: Signing key for sends
    BRIDGE_ADDRESS: Bridge contract address
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional

from avbridge.chains import NETWORKS, get_network
from avbridge.config import Settings, get_settings
from avbridge.dispatch import (
    BridgeError,
    BridgeOrchestrator,
    ConfirmationTimeout,
    ConfirmationWaiter,
    DispatchIntent,
    InvalidIntent,
    OptionsBuilder,
    TransportKind,
    encode_lz_receive_options,
)
from avbridge.transport import RemoteBridge, create_transports

logger = logging.getLogger(__name__)

TOKEN_DECIMALS = 18


def create_orchestrator(
    settings: Optional[Settings] = None,
    remote: Optional[RemoteBridge] = None,
) -> BridgeOrchestrator:
    """Create an orchestrator wired from settings."""
    settings = settings or get_settings()
    return BridgeOrchestrator(
        adapters=create_transports(remote=remote, settings=settings),
        options_builder=OptionsBuilder({
            TransportKind.PRIMARY: settings.layerzero_gas_limit,
            TransportKind.SECONDARY: settings.ccip_gas_limit,
        }),
        waiter=ConfirmationWaiter(
            poll_interval=settings.confirmation_poll_interval,
            confirmations=settings.confirmations,
            default_timeout=settings.confirmation_timeout,
        ),
    )


def parse_amount(value: str, wei: bool = False) -> int:
    """Parse a token amount into base units (18 decimals).

    Amounts finer than one base unit are rejected rather than rounded.
    """
    try:
        if wei:
            return int(value)
        numerator, denominator = Decimal(value).as_integer_ratio()
    except (ValueError, OverflowError, InvalidOperation) as e:
        raise InvalidIntent(f"Invalid amount: {value}") from e

    amount, remainder = divmod(numerator * 10**TOKEN_DECIMALS, denominator)
    if remainder:
        raise InvalidIntent(f"Amount {value} is finer than 1e-{TOKEN_DECIMALS} tokens")
    return amount


def build_intent(args: argparse.Namespace, transport: TransportKind) -> DispatchIntent:
    """Build a dispatch intent from parsed arguments."""
    if args.to_network:
        destination_id = get_network(args.to_network).destination_id(transport)
    else:
        destination_id = args.destination_id

    return DispatchIntent(
        destination_id=destination_id,
        recipient=args.recipient,
        amount=parse_amount(args.amount, args.wei),
        use_alternate_path=args.alternate_path,
    )


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates = {}
    if getattr(args, "dry_run", None) is not None:
        updates["dry_run"] = args.dry_run
    if getattr(args, "network", None):
        updates["network"] = get_network(args.network).name
    if getattr(args, "timeout", None) is not None:
        updates["confirmation_timeout"] = args.timeout
    return settings.model_copy(update=updates) if updates else settings


async def cmd_send(args: argparse.Namespace, settings: Settings) -> int:
    transport = TransportKind.parse(args.transport)
    intent = build_intent(args, transport)
    orchestrator = create_orchestrator(settings)

    try:
        result = await orchestrator.dispatch(intent, transport)
    except ConfirmationTimeout as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Transaction may still confirm: {e.handle.tx_hash}", file=sys.stderr)
        return 1

    print(f"fee: {result.fee}")
    if not result.succeeded:
        print(f"Reverted: {result.tx_hash}", file=sys.stderr)
        return 1

    print(f"Done: {result.tx_hash}")
    print(f"Explorer: {get_network(settings.network).tx_url(result.tx_hash)}")
    return 0


async def cmd_quote(args: argparse.Namespace, settings: Settings) -> int:
    transport = TransportKind.parse(args.transport)
    intent = build_intent(args, transport)
    orchestrator = create_orchestrator(settings)

    quote = await orchestrator.quote(intent, transport)
    print(f"fee: {quote.amount}")
    return 0


def cmd_options(args: argparse.Namespace) -> int:
    print(f"0x{encode_lz_receive_options(args.gas, args.value).hex()}")
    return 0


def cmd_networks() -> int:
    for name, network in NETWORKS.items():
        print(
            f"{name:<18} chain_id={network.chain_id:<10} "
            f"layerzero={network.layerzero_eid:<6} ccip={network.ccip_selector}"
        )
    return 0


def _add_intent_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--transport",
        default=TransportKind.PRIMARY.value,
        choices=[kind.value for kind in TransportKind],
        help="Messaging protocol (default: layerzero)",
    )
    destination = parser.add_mutually_exclusive_group(required=True)
    destination.add_argument("--to-network", help="Destination network name")
    destination.add_argument("--destination-id", type=int, help="Raw endpoint id / chain selector")
    parser.add_argument("--recipient", required=True, help="Recipient address (0x...)")
    parser.add_argument("--amount", required=True, help="Amount in tokens (18 decimals)")
    parser.add_argument("--wei", action="store_true", help="Amount is given in base units")
    parser.add_argument("--alternate-path", action="store_true", help="Use the alternate path")
    parser.add_argument("--network", help="Source network (default: NETWORK setting)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", dest="dry_run", action="store_true", default=None,
                      help="Use the simulated bridge")
    mode.add_argument("--live", dest="dry_run", action="store_false", default=None,
                      help="Send real transactions")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="avbridge", description="Cross-chain bridge dispatch")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Quote, send and wait for confirmation")
    _add_intent_arguments(send)
    send.add_argument("--timeout", type=float, help="Seconds to wait for confirmation")

    quote = sub.add_parser("quote", help="Quote the fee only")
    _add_intent_arguments(quote)

    options = sub.add_parser("options", help="Print LayerZero executor options hex")
    options.add_argument("--gas", type=int, default=2_000_000, help="lzReceive gas (default: 2000000)")
    options.add_argument("--value", type=int, default=0, help="lzReceive msg.value in wei (default: 0)")

    sub.add_parser("networks", help="List configured networks")
    return parser


async def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    log_level = logging.DEBUG if (args.verbose or settings.debug) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        if args.command == "options":
            return cmd_options(args)
        if args.command == "networks":
            return cmd_networks()

        settings = _apply_overrides(settings, args)
        logger.info(f"Settings: {settings.get_safe_dict()}")

        if args.command == "quote":
            return await cmd_quote(args, settings)
        return await cmd_send(args, settings)

    except BridgeError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
