"""
Configuration for ShareBox services.
"""

from .attempt_limit_config import AttemptLimitConfig
from .share_config import ShareConfig

__all__ = ["AttemptLimitConfig", "ShareConfig"]
