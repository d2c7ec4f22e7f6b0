"""
Filename Sanitizer

Normalizes user-supplied filenames into single-segment storage-safe names.
"""

import re
import time

MAX_NAME_LENGTH = 200

_RESERVED_CHARS = re.compile(r'[<>:"/\\|?*]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_NON_WORD_CHARS = re.compile(r"[^\w\-]", re.ASCII)
_UNDERSCORE_RUNS = re.compile(r"_{2,}")
_SAFE_EXTENSION = re.compile(r"^\.[\w\-]*$", re.ASCII)


def split_extension(filename: str) -> tuple[str, str]:
    """
    Split a filename at its last dot.

    A leading dot (``.bashrc``) is part of the name, not an extension.

    Returns:
        Tuple of (name, extension) where extension includes the dot
    """
    last_dot = filename.rfind(".")
    if last_dot > 0:
        return filename[:last_dot], filename[last_dot:]
    return filename, ""


def _clean(value: str) -> str:
    value = _RESERVED_CHARS.sub("_", value)
    value = _CONTROL_CHARS.sub("", value)
    value = _NON_WORD_CHARS.sub("_", value)
    return _UNDERSCORE_RUNS.sub("_", value)


def fallback_name() -> str:
    """Generate a time-based name for inputs that sanitize to nothing."""
    return f"file_{int(time.time() * 1000)}"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename for use as a storage key segment.

    The name part keeps only ASCII word characters and hyphens, collapses
    underscore runs, is stripped of edge underscores and capped at 200
    characters. The extension is re-appended unchanged when it is already
    safe, otherwise it gets the same character mapping.

    Args:
        filename: Arbitrary user-supplied filename

    Returns:
        Sanitized filename, never empty
    """
    name, extension = split_extension(filename or "")

    name = _clean(name).strip("_")
    name = name[:MAX_NAME_LENGTH]
    if not name:
        name = fallback_name()

    if extension and not _SAFE_EXTENSION.match(extension):
        extension = "." + _clean(extension[1:]).strip("_")
        if extension == ".":
            extension = ""

    return name + extension


def deduplicate_names(names: list[str]) -> list[str]:
    """
    Make sanitized names unique within a batch.

    Later duplicates get ``_1``, ``_2``... inserted before the extension.
    Order is preserved.
    """
    seen = set()
    result = []
    for name in names:
        candidate = name
        if candidate in seen:
            base, extension = split_extension(name)
            counter = 1
            while f"{base}_{counter}{extension}" in seen:
                counter += 1
            candidate = f"{base}_{counter}{extension}"
        seen.add(candidate)
        result.append(candidate)
    return result
