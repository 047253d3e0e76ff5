"""Execution options for each transport.

Gas limits are flat per-transport baselines; there is no per-message
gas estimation.

LayerZero V2 type-3 options layout (executor lzReceive option):

    uint16 options type (3)
    uint8  worker id (1 = executor)
    uint16 option size (option type byte + params)
    uint8  option type (1 = lzReceive)
    uint128 gas
    uint128 value (only when non-zero)
"""

import logging
from typing import Optional

from avbridge.dispatch.errors import InvalidIntent
from avbridge.dispatch.models import DispatchIntent, ExecutionOptions, TransportKind

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMITS = {
    TransportKind.PRIMARY: 2_000_000,
    TransportKind.SECONDARY: 200_000,
}

LZ_OPTIONS_TYPE_3 = 3
LZ_EXECUTOR_WORKER_ID = 1
LZ_OPTION_TYPE_LZRECEIVE = 1
UINT128_LIMIT = 2**128


def encode_lz_receive_options(gas: int, value: int = 0) -> bytes:
    """Encode a type-3 options blob with one executor lzReceive option.

    encode_lz_receive_options(2_000_000).hex() ==
    "000301001101000000000000000000000000001e8480"
    """
    if not 0 < gas < UINT128_LIMIT:
        raise InvalidIntent(f"lzReceive gas out of range: {gas}")
    if not 0 <= value < UINT128_LIMIT:
        raise InvalidIntent(f"lzReceive value out of range: {value}")

    params = gas.to_bytes(16, "big")
    if value:
        params += value.to_bytes(16, "big")
    option_size = len(params) + 1

    return (
        LZ_OPTIONS_TYPE_3.to_bytes(2, "big")
        + LZ_EXECUTOR_WORKER_ID.to_bytes(1, "big")
        + option_size.to_bytes(2, "big")
        + LZ_OPTION_TYPE_LZRECEIVE.to_bytes(1, "big")
        + params
    )


class OptionsBuilder:
    """Builds ExecutionOptions for an intent. Stateless after construction."""

    def __init__(self, gas_limits: Optional[dict[TransportKind, int]] = None):
        self.gas_limits = dict(DEFAULT_GAS_LIMITS)
        if gas_limits:
            self.gas_limits.update(gas_limits)

    def build(self, intent: DispatchIntent, transport: TransportKind) -> ExecutionOptions:
        """Build fresh options for one dispatch.

        Args:
            intent: Validated dispatch intent
            transport: Selected transport

        Returns:
            ExecutionOptions with native_value 0

        Raises:
            InvalidIntent: If the intent amount is not positive
        """
        if intent.amount <= 0:
            raise InvalidIntent("Amount must be greater than zero")

        gas_limit = self.gas_limits[transport]

        if transport is TransportKind.PRIMARY:
            extra = encode_lz_receive_options(gas_limit)
        else:
            extra = b""

        logger.debug(f"Built {transport.label} options: gas_limit={gas_limit}, extra=0x{extra.hex()}")
        return ExecutionOptions(gas_limit=gas_limit, native_value=0, extra_options=extra)
