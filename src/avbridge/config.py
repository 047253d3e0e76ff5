"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from avbridge.chains import get_network


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Safety Guards
    # ======================
    dry_run: bool = Field(default=True, description="Use the simulated bridge (no real transactions)")

    # ======================
    # Network / Account
    # ======================
    network: str = Field(default="avalancheFuji", description="Source network name")
    private_key: Optional[str] = Field(default=None, description="Signing key for send transactions")
    bridge_address: str = Field(
        default="0xb6a98600a66C35985958C4DDA1599A4C15Ff9D70",
        description="AvUSDBridging contract address on the source network",
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    arbitrum_sepolia_rpc_url: str = Field(
        default="https://sepolia-rollup.arbitrum.io/rpc", description="Arbitrum Sepolia RPC URL"
    )
    avalanche_fuji_rpc_url: str = Field(
        default="https://api.avax-test.network/ext/bc/C/rpc", description="Avalanche Fuji RPC URL"
    )
    optimism_sepolia_rpc_url: str = Field(
        default="https://sepolia.optimism.io", description="Optimism Sepolia RPC URL"
    )
    rpc_timeout: float = Field(default=30.0, description="RPC request timeout in seconds")

    # ======================
    # Execution Options
    # ======================
    layerzero_gas_limit: int = Field(default=2_000_000, description="Executor lzReceive gas limit")
    ccip_gas_limit: int = Field(default=200_000, description="CCIP receive gas limit")

    # ======================
    # Confirmation
    # ======================
    confirmation_timeout: float = Field(default=120.0, description="Seconds to wait for a receipt")
    confirmation_poll_interval: float = Field(default=2.0, description="Seconds between receipt polls")
    confirmations: int = Field(default=1, description="Block confirmations required")

    @property
    def has_signer(self) -> bool:
        """Check if a signing key is configured."""
        return bool(self.private_key)

    def get_rpc_url(self, network: Optional[str] = None) -> str:
        """Get RPC URL for a network (defaults to the source network)."""
        name = get_network(network or self.network).name
        rpc_map = {
            "arbitrumSepolia": self.arbitrum_sepolia_rpc_url,
            "avalancheFuji": self.avalanche_fuji_rpc_url,
            "optimismSepolia": self.optimism_sepolia_rpc_url,
        }
        return rpc_map.get(name) or get_network(name).rpc_url

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "dry_run": self.dry_run,
            "network": self.network,
            "rpc_url": self.get_rpc_url(),
            "bridge_address": self.bridge_address,
            "private_key": "***" if self.private_key else "(not set)",
            "gas_limits": {
                "layerzero": self.layerzero_gas_limit,
                "ccip": self.ccip_gas_limit,
            },
            "confirmation": {
                "timeout": self.confirmation_timeout,
                "poll_interval": self.confirmation_poll_interval,
                "confirmations": self.confirmations,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
