"""
Attempt Limit Configuration

Environment-based configuration for password attempt limiting.
"""

import os
from dataclasses import dataclass, field
from typing import List

from sharebox.domain.attempt_limiting.value_objects import AttemptLimit


@dataclass
class AttemptLimitConfig:
    """
    Attempt limit configuration from environment variables.

    Attributes:
        enabled: Whether wrong passwords are counted at all
        max_attempts: Wrong passwords allowed per project and client
        window_seconds: Counting window, starting at the first failure
        whitelist: Client IPs that are never locked out
    """
    enabled: bool = True
    max_attempts: int = 10
    window_seconds: int = 900
    whitelist: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "AttemptLimitConfig":
        """
        Load configuration from environment variables.

        Returns:
            AttemptLimitConfig instance with loaded configuration
        """
        return cls(
            enabled=os.getenv("ATTEMPT_LIMIT_ENABLED", "true").lower() == "true",
            max_attempts=int(os.getenv("ATTEMPT_LIMIT_MAX", "10")),
            window_seconds=int(os.getenv("ATTEMPT_LIMIT_WINDOW_SECONDS", "900")),
            whitelist=cls._parse_whitelist(os.getenv("ATTEMPT_LIMIT_WHITELIST", "")),
        )

    @staticmethod
    def _parse_whitelist(value: str) -> List[str]:
        """
        Parse whitelist from comma-separated IP addresses.

        Example: "127.0.0.1,10.0.0.1"
        """
        if not value:
            return []
        return [ip.strip() for ip in value.split(",") if ip.strip()]

    def to_limit(self) -> AttemptLimit:
        return AttemptLimit(max_attempts=self.max_attempts, window_seconds=self.window_seconds)
