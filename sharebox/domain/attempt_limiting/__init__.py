"""
Attempt Limiting Domain

Per-project, per-client limits on wrong share passwords.
"""

from .entities import AttemptState
from .repositories import IAttemptRepository
from .services import AttemptPolicy, CounterAttemptPolicy, NoAttemptLimit
from .value_objects import AttemptLimit, ClientIP

__all__ = [
    "AttemptLimit",
    "AttemptPolicy",
    "AttemptState",
    "ClientIP",
    "CounterAttemptPolicy",
    "IAttemptRepository",
    "NoAttemptLimit",
]
