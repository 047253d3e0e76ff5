#!/usr/bin/env python3
"""Dispatch one transfer over each transport and report the results.

Uses the configured source network and bridge address. Runs against the
simulated bridge unless DRY_RUN=false and PRIVATE_KEY are set.

Usage:
    python scripts/smoke_dispatch.py [layerzero|ccip|all]
"""

import asyncio
import sys

from dotenv import load_dotenv
load_dotenv()

from avbridge.chains import get_network
from avbridge.cli import create_orchestrator
from avbridge.config import get_settings
from avbridge.dispatch import BridgeError, DispatchIntent, TransportKind

RECIPIENT = "0x19596e1D6cd97916514B5DBaA4730781eFE49975"
DESTINATION = "optimismSepolia"

AMOUNTS = {
    TransportKind.PRIMARY: 25 * 10**18,
    TransportKind.SECONDARY: 15 * 10**18,
}


async def smoke(transports: list[TransportKind]) -> bool:
    settings = get_settings()
    orchestrator = create_orchestrator(settings)
    destination = get_network(DESTINATION)
    ok = True

    print(f"Source: {settings.network} (dry_run={settings.dry_run})")
    for transport in transports:
        intent = DispatchIntent(
            destination_id=destination.destination_id(transport),
            recipient=RECIPIENT,
            amount=AMOUNTS[transport],
            use_alternate_path=True,
        )
        try:
            result = await orchestrator.dispatch(intent, transport)
        except BridgeError as e:
            print(f"  {transport.label}: FAILED - {e}")
            ok = False
            continue

        print(f"  {transport.label}: fee {result.fee} wei, {result.receipt.status.value}, tx {result.tx_hash}")
        ok = ok and result.succeeded

    return ok


if __name__ == "__main__":
    choice = sys.argv[1] if len(sys.argv) > 1 else "all"
    if choice == "all":
        selected = list(TransportKind)
    else:
        selected = [TransportKind.parse(choice)]

    sys.exit(0 if asyncio.run(smoke(selected)) else 1)
