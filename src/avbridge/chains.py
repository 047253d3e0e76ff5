"""Network registry for the bridge deployments.

Each network carries its EVM chain id plus the identifiers the two
messaging protocols use to address it:
- LayerZero V2 endpoint id (uint32)
- Chainlink CCIP chain selector (uint64)
"""

from dataclasses import dataclass
from typing import Optional

from avbridge.dispatch.errors import InvalidIntent
from avbridge.dispatch.models import TransportKind


@dataclass(frozen=True)
class NetworkConfig:
    """Configuration for a network the bridge is deployed on."""

    name: str
    chain_id: int
    rpc_url: str
    explorer_url: str
    layerzero_eid: int
    ccip_selector: int

    def destination_id(self, transport: TransportKind) -> int:
        """Identifier used to address this network over a transport."""
        if transport is TransportKind.PRIMARY:
            return self.layerzero_eid
        return self.ccip_selector

    def tx_url(self, tx_hash: str) -> str:
        """Block explorer link for a transaction."""
        return f"{self.explorer_url}/tx/{tx_hash}"


# ======================
# Network Configurations
# ======================

NETWORKS: dict[str, NetworkConfig] = {
    "arbitrumSepolia": NetworkConfig(
        name="arbitrumSepolia",
        chain_id=421_614,
        rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
        explorer_url="https://sepolia.arbiscan.io",
        layerzero_eid=40231,
        ccip_selector=3478487238524512106,
    ),
    "avalancheFuji": NetworkConfig(
        name="avalancheFuji",
        chain_id=43_113,
        rpc_url="https://api.avax-test.network/ext/bc/C/rpc",
        explorer_url="https://testnet.snowtrace.io",
        layerzero_eid=40106,
        ccip_selector=14767482510784806043,
    ),
    "optimismSepolia": NetworkConfig(
        name="optimismSepolia",
        chain_id=11_155_420,
        rpc_url="https://sepolia.optimism.io",
        explorer_url="https://sepolia-optimism.etherscan.io",
        layerzero_eid=40232,
        ccip_selector=5224473277236331295,
    ),
}


def find_network(name: str) -> Optional[NetworkConfig]:
    """Look up a network by name (case-insensitive)."""
    lowered = name.lower()
    for key, network in NETWORKS.items():
        if key.lower() == lowered:
            return network
    return None


def get_network(name: str) -> NetworkConfig:
    """Get a network by name, raising InvalidIntent if unknown."""
    network = find_network(name)
    if network is None:
        raise InvalidIntent(
            f"Unknown network '{name}'. Known networks: {', '.join(NETWORKS)}"
        )
    return network
