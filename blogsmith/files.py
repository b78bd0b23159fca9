from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Optional

from .errors import DuplicatePathError
from .utils import glob_to_regex

MARKDOWN_SUFFIXES = {".md", ".markdown"}
HTML_SUFFIXES = {".html", ".htm"}


@dataclass(eq=False)
class FileEntry:
    path: str
    contents: bytes
    metadata: dict = field(default_factory=dict)
    mtime: Optional[float] = None

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    def __repr__(self) -> str:
        return f"FileEntry({self.path!r}, {len(self.contents)} bytes)"


def is_markdown(path: str) -> bool:
    return PurePosixPath(path).suffix.lower() in MARKDOWN_SUFFIXES


def is_html(path: str) -> bool:
    return PurePosixPath(path).suffix.lower() in HTML_SUFFIXES


def url_for(path: str) -> str:
    if path == "index.html":
        return "/"
    if path.endswith("/index.html"):
        return "/" + path[: -len("index.html")]
    return "/" + path


@lru_cache(maxsize=None)
def _compiled(pattern: str):
    return glob_to_regex(pattern.lstrip("/"))


def match_pattern(pattern: str, path: str) -> bool:
    return _compiled(pattern).match(path) is not None


def rename_entry(files: dict[str, FileEntry], entry: FileEntry, new_path: str) -> None:
    """Move ``entry`` to ``new_path`` inside ``files``.

    Refuses to overwrite another entry. The mapping is updated in place and the
    entry object keeps its identity, so references held in other entries'
    metadata follow the move.
    """
    if new_path == entry.path:
        return
    if new_path in files:
        raise DuplicatePathError(new_path, entry.path)
    del files[entry.path]
    entry.path = new_path
    files[new_path] = entry


@dataclass
class Site:
    """Build-wide state shared by the stages of one build."""

    metadata: dict = field(default_factory=dict)
    collections: dict = field(default_factory=dict)
