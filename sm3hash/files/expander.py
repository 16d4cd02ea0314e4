"""
Path expansion for dropped or browsed items.
Turns a mix of files and folders into a flat, de-duplicated list of files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


def _list_sorted(folder: Path) -> Optional[list[Path]]:
    try:
        return sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Skipping unreadable folder %s: %s", folder, exc)
        return None


def walk_files(root: Path) -> Iterator[Path]:
    """
    Yield regular files below `root` in lexical name order, depth first.

    Folders that cannot be listed are skipped; symlinked folders are not followed.
    Walks with an explicit stack so folder depth is not limited by recursion.
    """
    entries = _list_sorted(root)
    if entries is None:
        return
    stack = [iter(entries)]

    while stack:
        item = next(stack[-1], None)
        if item is None:
            stack.pop()
            continue
        try:
            if item.is_dir():
                if not item.is_symlink():
                    children = _list_sorted(item)
                    if children:
                        stack.append(iter(children))
                continue
            if item.is_file():
                yield item
        except OSError as exc:
            logger.debug("Skipping %s: %s", item, exc)


def expand_paths(paths: Iterable[str]) -> list[str]:
    """
    Resolve files and folders into the list of files to hash.

    Missing paths are skipped silently; a path seen before (same string) is
    not added again. First-seen order is kept.
    """
    out: list[str] = []
    seen: set[str] = set()

    def add(candidate: str) -> None:
        if candidate in seen:
            return
        seen.add(candidate)
        out.append(candidate)

    for raw in paths:
        if not raw:
            continue
        raw = os.fspath(raw)
        path = Path(raw)
        try:
            if path.is_dir():
                for item in walk_files(path):
                    add(str(item))
            elif path.is_file():
                add(raw)
            else:
                logger.debug("Ignoring missing or special path: %s", raw)
        except OSError as exc:
            logger.debug("Ignoring %s: %s", raw, exc)

    return out
