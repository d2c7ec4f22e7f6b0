"""
Sharing Domain

Projects, files, passwords, the security policy and the access gate.
"""

from .entities import AccessLogEntry, ExpiredProject, Project, SharedFile
from .policy import SecurityPolicy
from .repositories import ProjectRepository
from .sanitizer import deduplicate_names, sanitize_filename
from .services import AccessGate, AccessGrant, IPasswordHasher
from .value_objects import AccessState, SharePassword, StorageKey, UploadItem

__all__ = [
    "AccessGate",
    "AccessGrant",
    "AccessLogEntry",
    "AccessState",
    "ExpiredProject",
    "IPasswordHasher",
    "Project",
    "ProjectRepository",
    "SecurityPolicy",
    "SharePassword",
    "SharedFile",
    "StorageKey",
    "UploadItem",
    "deduplicate_names",
    "sanitize_filename",
]
