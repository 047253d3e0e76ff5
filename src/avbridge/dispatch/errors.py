"""Error taxonomy for the dispatch lifecycle.

Every failure of a dispatch surfaces as one of these:
- InvalidIntent: malformed intent, detected locally
- QuoteUnavailable: fee view call failed or reverted
- ZeroQuote: fee view returned zero (unsupported route)
- SendRejected: send reverted for a reason other than underfunding
- SendUnderfunded: send reverted because the attached fee was too low
- ConfirmationTimeout: no terminal receipt within the allotted wait
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for all dispatch errors."""
    pass


class InvalidIntent(BridgeError):
    """Raised when an intent is malformed or cannot be routed."""
    pass


class QuoteUnavailable(BridgeError):
    """Raised when the remote fee view call fails."""

    def __init__(self, transport: str, reason: str):
        self.transport = transport
        self.reason = reason
        super().__init__(f"{transport} quote unavailable: {reason}")


class ZeroQuote(BridgeError):
    """Raised when a transport quotes a zero fee."""

    def __init__(self, transport: str, destination_id: int):
        self.transport = transport
        self.destination_id = destination_id
        super().__init__(
            f"{transport} quoted zero fee for destination {destination_id} "
            f"(route not supported)"
        )


class SendRejected(BridgeError):
    """Raised when the send transaction is rejected."""

    def __init__(self, transport: str, reason: str, data: Optional[str] = None):
        self.transport = transport
        self.reason = reason
        self.data = data
        super().__init__(f"{transport} send rejected: {reason}")


class SendUnderfunded(SendRejected):
    """Raised when the attached value is below the protocol minimum."""

    def __init__(self, transport: str, supplied: int, reason: str = "insufficient fee"):
        self.supplied = supplied
        super().__init__(transport, f"{reason} (supplied {supplied} wei)")


class ConfirmationTimeout(BridgeError):
    """Raised when a transaction has no terminal receipt in time.

    The handle stays valid; callers may wait on it again.
    """

    def __init__(self, handle, timeout: float):
        self.handle = handle
        self.timeout = timeout
        super().__init__(f"Transaction {handle.tx_hash} not confirmed after {timeout}s")


# ======================
# Remote boundary errors
# ======================
# Raised by RemoteBridge implementations; adapters translate them into the
# dispatch errors above.


class RemoteCallError(Exception):
    """Raised when a call to the remote chain fails (RPC, timeout, encoding)."""
    pass


class ContractRevert(RemoteCallError):
    """Raised when the remote contract reverts.

    Attributes:
        reason: Revert reason string (or custom error description)
        data: Raw revert data as 0x-prefixed hex, if the node returned it
    """

    def __init__(self, reason: str, data: Optional[str] = None):
        self.reason = reason
        self.data = data
        super().__init__(reason)

    @property
    def selector(self) -> Optional[bytes]:
        """First four bytes of the revert data (custom error selector)."""
        if not self.data:
            return None
        text = self.data[2:] if self.data.startswith("0x") else self.data
        try:
            raw = bytes.fromhex(text[:8])
        except ValueError:
            return None
        return raw if len(raw) == 4 else None
