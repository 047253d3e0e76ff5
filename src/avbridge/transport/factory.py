"""Factory for creating transport adapters.

Creates adapters over the real bridge contract when dry-run is disabled and a
signing key is configured, otherwise over the simulated bridge.
"""

import logging
from typing import Optional

from avbridge.chains import get_network
from avbridge.config import Settings, get_settings
from avbridge.dispatch.models import TransportKind
from avbridge.transport.base import RemoteBridge, TransportAdapter
from avbridge.transport.ccip import CCIPTransport
from avbridge.transport.layerzero import LayerZeroTransport

logger = logging.getLogger(__name__)

ADAPTER_CLASSES: dict[TransportKind, type[TransportAdapter]] = {
    TransportKind.PRIMARY: LayerZeroTransport,
    TransportKind.SECONDARY: CCIPTransport,
}


def create_remote_bridge(settings: Optional[Settings] = None) -> RemoteBridge:
    """Create the remote bridge surface for the configured source network."""
    settings = settings or get_settings()

    if settings.dry_run:
        from avbridge.transport.simulated import SimulatedBridge

        logger.info("Dry-run mode: using simulated bridge")
        return SimulatedBridge()

    if not settings.has_signer:
        logger.warning("PRIVATE_KEY not set - sends will be rejected")

    from avbridge.transport.contract import Web3BridgeContract

    network = get_network(settings.network)
    return Web3BridgeContract(
        rpc_url=settings.get_rpc_url(network.name),
        address=settings.bridge_address,
        private_key=settings.private_key,
        chain_id=network.chain_id,
        request_timeout=settings.rpc_timeout,
    )


def create_transport(
    kind: TransportKind,
    remote: Optional[RemoteBridge] = None,
    settings: Optional[Settings] = None,
) -> TransportAdapter:
    """Create the adapter for one transport."""
    remote = remote or create_remote_bridge(settings)
    return ADAPTER_CLASSES[kind](remote)


def create_transports(
    remote: Optional[RemoteBridge] = None,
    settings: Optional[Settings] = None,
) -> dict[TransportKind, TransportAdapter]:
    """Create adapters for every transport, sharing one remote bridge."""
    remote = remote or create_remote_bridge(settings)
    return {kind: cls(remote) for kind, cls in ADAPTER_CLASSES.items()}
