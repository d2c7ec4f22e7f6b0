"""
Attempt Limiting Entities

Domain entities for password attempt limiting with zero external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from .value_objects import ClientIP


@dataclass
class AttemptState:
    """
    Entity representing failed password attempts of one client on one project.
    """
    project_id: str
    client_ip: ClientIP
    failures: int
    limit: int
    reset_at: datetime

    def is_locked(self) -> bool:
        """True once the failure count has reached the limit."""
        return self.failures >= self.limit

    def remaining(self) -> int:
        return max(0, self.limit - self.failures)

    def retry_after_seconds(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.reset_at - now).total_seconds()))

    def to_headers(self) -> Dict[str, str]:
        """
        Generate HTTP headers describing the remaining attempts.

        Returns:
            Dictionary with X-Attempts-* headers, plus Retry-After when locked
        """
        headers = {
            "X-Attempts-Limit": str(self.limit),
            "X-Attempts-Remaining": str(self.remaining()),
            "X-Attempts-Reset": str(int(self.reset_at.timestamp())),
        }
        if self.is_locked():
            headers["Retry-After"] = str(self.retry_after_seconds())
        return headers
