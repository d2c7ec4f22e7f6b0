"""
Attempt Limiting Domain Services

Swappable policies deciding whether a client may try another share password.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import TooManyAttemptsError
from .entities import AttemptState
from .repositories import IAttemptRepository
from .value_objects import AttemptLimit, ClientIP

logger = logging.getLogger(__name__)


class AttemptPolicy(ABC):
    """
    Hook consulted around every password check.

    The access service calls ``check`` before the gate, ``record_failure``
    after a wrong password and ``reset`` after a granted access.
    """

    @abstractmethod
    def check(self, project_id: str, client_ip: str) -> None:
        """
        Raises:
            TooManyAttemptsError: If the client is locked out of the project
        """
        ...

    @abstractmethod
    def record_failure(self, project_id: str, client_ip: str) -> Optional[AttemptState]:
        ...

    @abstractmethod
    def reset(self, project_id: str, client_ip: str) -> None:
        ...


class NoAttemptLimit(AttemptPolicy):
    """Policy that never locks anyone out."""

    def check(self, project_id: str, client_ip: str) -> None:
        return None

    def record_failure(self, project_id: str, client_ip: str) -> Optional[AttemptState]:
        return None

    def reset(self, project_id: str, client_ip: str) -> None:
        return None


class CounterAttemptPolicy(AttemptPolicy):
    """
    Locks a client out of a project after too many wrong passwords.

    Counts failures per (project, client IP) inside a fixed window that
    starts with the first failure.
    """

    def __init__(
        self,
        repository: IAttemptRepository,
        limit: AttemptLimit,
        whitelist: Optional[List[str]] = None,
    ):
        """
        Initialize with repository and limit.

        Args:
            repository: Attempt counter repository
            limit: Allowed failures per window
            whitelist: Client IPs that are never locked out
        """
        self.repository = repository
        self.limit = limit
        self.whitelist = whitelist or []

    def check(self, project_id: str, client_ip: str) -> None:
        ip = ClientIP.parse(client_ip)
        if ip.is_whitelisted(self.whitelist):
            return

        state = self.repository.get_state(project_id, ip, self.limit)
        if state.is_locked():
            logger.info(
                f"Attempt limit reached for project {project_id} "
                f"from {ip.hash_for_key()}"
            )
            raise TooManyAttemptsError(
                technical_message=f"Too many failed attempts for project {project_id}",
                context={
                    "retry_after": state.retry_after_seconds(),
                    "reset_at": state.reset_at.isoformat(),
                },
            )

    def record_failure(self, project_id: str, client_ip: str) -> Optional[AttemptState]:
        ip = ClientIP.parse(client_ip)
        if ip.is_whitelisted(self.whitelist):
            return None
        return self.repository.record_failure(project_id, ip, self.limit)

    def reset(self, project_id: str, client_ip: str) -> None:
        self.repository.reset(project_id, ClientIP.parse(client_ip))
