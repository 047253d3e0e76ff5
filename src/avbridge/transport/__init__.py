"""Transport adapters for the bridge contract.

Transports:
- LayerZero (primary): quoteSendFeeWithLayerzero / sendWithLayerzero
- CCIP (secondary): quoteSendFeeWithCCIP / sendWithCCIP
"""

from avbridge.transport.base import RemoteBridge, TransportAdapter
from avbridge.transport.ccip import CCIPTransport
from avbridge.transport.factory import (
    create_remote_bridge,
    create_transport,
    create_transports,
)
from avbridge.transport.layerzero import LayerZeroTransport
from avbridge.transport.simulated import SimulatedBridge

__all__ = [
    # Base classes
    "RemoteBridge",
    "TransportAdapter",
    # Transports
    "LayerZeroTransport",
    "CCIPTransport",
    "SimulatedBridge",
    # Factory functions
    "create_remote_bridge",
    "create_transport",
    "create_transports",
]
