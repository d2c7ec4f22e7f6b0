"""
Response Descriptors

Shapes shared by the upload and access services when describing files.
"""

from typing import Any, Dict
from urllib.parse import quote

from sharebox.domain.sharing.entities import SharedFile

DEFAULT_DOWNLOAD_BASE = "/api/v1/download"


def download_path(download_base: str, shared_file: SharedFile) -> str:
    """Path of the download endpoint for one file."""
    return f"{download_base.rstrip('/')}/{shared_file.project_id}/{quote(shared_file.name)}"


def describe_file(shared_file: SharedFile, download_base: str = DEFAULT_DOWNLOAD_BASE) -> Dict[str, Any]:
    """
    Describe a file for API responses.

    Returns:
        Dictionary with name, size, contentType and downloadPath
    """
    return {
        "name": shared_file.name,
        "size": shared_file.size,
        "contentType": shared_file.content_type,
        "downloadPath": download_path(download_base, shared_file),
    }
