"""
Attempt Limiting Value Objects

Immutable value objects for password attempt limiting with zero external dependencies.
"""

import hashlib
import ipaddress
from dataclasses import dataclass
from typing import List

UNKNOWN_ADDRESS = "0.0.0.0"


@dataclass(frozen=True)
class ClientIP:
    """
    Immutable client IP address value object.

    Validates IP address format and provides whitelist checking
    and hash generation for Redis keys.
    """
    address: str

    def __post_init__(self):
        """Validate IP address format (IPv4 or IPv6)."""
        try:
            ipaddress.ip_address(self.address)
        except ValueError as e:
            raise ValueError(f"Invalid IP address format: {self.address}") from e

    @classmethod
    def parse(cls, address: str) -> "ClientIP":
        """Build a ClientIP, mapping unparseable input to the unknown address."""
        try:
            return cls((address or "").strip())
        except ValueError:
            return cls(UNKNOWN_ADDRESS)

    def is_whitelisted(self, whitelist: List[str]) -> bool:
        return self.address in whitelist

    def hash_for_key(self) -> str:
        """
        Generate Redis key-safe hash.

        Hashes the IP address for privacy while maintaining uniqueness.
        Truncates to 16 characters to balance collision risk with key length.
        """
        return hashlib.sha256(self.address.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class AttemptLimit:
    """
    Immutable attempt limit configuration.

    Attributes:
        max_attempts: Failed attempts allowed inside one window
        window_seconds: Window length, counted from the first failure
    """
    max_attempts: int
    window_seconds: int

    def __post_init__(self):
        if self.max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.window_seconds <= 0:
            raise ValueError(f"Window must be positive, got {self.window_seconds}")
