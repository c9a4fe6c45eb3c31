"""
ZUSD Trove SDK - Errors

Every failure raised by the hint resolver and the web3 adapter derives
from HintError so callers can catch the whole family in one place.
"""

from typing import Any


class HintError(Exception):
    """Base class for trove SDK failures."""


class InvalidPartition(HintError):
    """Partition (collateral index) is not known to the sorted list."""
    def __init__(self, partition: Any):
        self.partition = partition
        super().__init__(f"Invalid partition: {partition!r}")


class InvalidAmount(HintError):
    """A uint256 argument (amount, price, iteration cap) is out of range."""
    def __init__(self, name: str, value: Any, reason: str = "must be an integer in [0, 2**256)"):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name} {value!r}: {reason}")


class InvalidKey(InvalidAmount):
    """Ordering key is not an unsigned 256-bit integer."""
    def __init__(self, key: Any, reason: str = "must be an integer in [0, 2**256)"):
        self.key = key
        super().__init__("key", key, reason)


class RemoteQueryFailed(HintError):
    """A read against the chain failed (transport, timeout or revert)."""
    def __init__(self, method: str, message: str):
        self.method = method
        self.message = message
        super().__init__(f"Remote query {method} failed: {message}")


class EmptyCollection(HintError):
    """Approximate-rank sampling was asked to run over an empty list."""
    def __init__(self, partition: int):
        self.partition = partition
        super().__init__(f"Partition {partition} has no troves to sample")


class ConfigError(HintError):
    """Network manifest is incomplete or malformed, or a contract has no bundled ABI."""
