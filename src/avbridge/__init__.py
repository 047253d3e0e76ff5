"""Client for dispatching value-bearing cross-chain messages through the
AvUSD bridge contract over LayerZero or Chainlink CCIP."""

__version__ = "0.1.0"
