"""
Attempt Limiting Repositories

Repository interface for failed-attempt counters.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from .entities import AttemptState
from .value_objects import AttemptLimit, ClientIP


class IAttemptRepository(ABC):
    """Abstract repository interface for attempt counter persistence."""

    @abstractmethod
    def get_state(
        self, project_id: str, client_ip: ClientIP, limit: AttemptLimit
    ) -> AttemptState:
        """
        Get the current failure count for a client on a project.

        Args:
            project_id: Project identifier
            client_ip: Client IP address
            limit: Attempt limit configuration

        Returns:
            AttemptState with current count
        """
        ...

    @abstractmethod
    def record_failure(
        self, project_id: str, client_ip: ClientIP, limit: AttemptLimit
    ) -> AttemptState:
        """
        Atomically increment the failure counter and return the updated state.

        The window starts with the first failure.
        """
        ...

    @abstractmethod
    def reset(self, project_id: str, client_ip: ClientIP) -> bool:
        """
        Clear the failure counter.

        Returns:
            True if a counter was removed
        """
        ...
