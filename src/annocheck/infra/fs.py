from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Path resolution and file reading helpers shared by group discovery and
engine loading.
"""

import os
from typing import List, Optional

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: str, fallback: str) -> str:
    """
    Normalize a path to an absolute path, using a fallback if empty.

    Args:
        path: Input path string.
        fallback: Path to use if input is empty or whitespace.

    Returns:
        str: Absolute path with user home expanded.
    """
    candidate = (path or "").strip() or fallback
    return os.path.abspath(os.path.expanduser(candidate))


def find_file(name: str, prefer_dir: str, fallback_dir: Optional[str] = None) -> Optional[str]:
    """
    Resolve a file name against a preferred directory, then a shared fallback.

    Args:
        name: Relative file name (may contain sub-directories).
        prefer_dir: Directory searched first (usually the group directory).
        fallback_dir: Shared directory searched second.

    Returns:
        Optional[str]: Absolute path of the first existing match, or None.
    """
    for base in (prefer_dir, fallback_dir):
        if not base:
            continue
        candidate = os.path.abspath(os.path.join(base, name))
        if os.path.isfile(candidate):
            return candidate
    return None


def list_files(directory: str, extensions: List[str]) -> List[str]:
    """
    List regular files in a directory whose extension is whitelisted, sorted by name.

    Args:
        directory: Directory to list (not recursive).
        extensions: Allowed extensions, including the leading dot.

    Returns:
        List[str]: Sorted base names.
    """
    names = []
    for entry in os.listdir(directory):
        if not os.path.isfile(os.path.join(directory, entry)):
            continue
        if os.path.splitext(entry)[1] in extensions:
            names.append(entry)
    return sorted(names)


def list_subdirectories(directory: str) -> List[str]:
    """Return the sorted names of the immediate sub-directories."""
    return sorted(
        entry for entry in os.listdir(directory)
        if os.path.isdir(os.path.join(directory, entry))
    )


# -----------------------------------------------------------------------------
# I/O API
# -----------------------------------------------------------------------------

def read_text(base_dir: str, name: str) -> str:
    """
    Read a UTF-8 text file, resolving relative names against a base directory.

    Args:
        base_dir: Directory for relative names.
        name: Relative or absolute file name.

    Returns:
        str: File contents.
    """
    path = name if os.path.isabs(name) else os.path.join(base_dir, name)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
