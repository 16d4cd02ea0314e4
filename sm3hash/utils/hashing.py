"""
Hashing utilities.
One-call helpers around the streaming SM3 engine for code that only needs
the hex digest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from sm3hash.core.stream import hash_file


def compute_sm3(
    file_path: Union[str, Path],
    chunk_size: Optional[int] = None,
    uppercase: bool = False,
) -> str:
    """
    Compute the SM3 hex digest of a file using streaming reads.
    Keeps memory usage small even for very large files.
    """
    result = hash_file(str(file_path), chunk_size=chunk_size)
    return result.hexdigest(uppercase=uppercase)
