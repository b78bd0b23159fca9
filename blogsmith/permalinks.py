from __future__ import annotations

import datetime as dt
import re
from pathlib import PurePosixPath
from typing import Optional

from .config import PermalinksConfig
from .errors import PermalinkError
from .files import FileEntry, Site, is_html, rename_entry, url_for
from .utils import slugify

PLACEHOLDER_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def linkset_matches(match: dict, metadata: dict) -> bool:
    for key, expected in match.items():
        value = metadata.get(key)
        if isinstance(value, list):
            if expected not in value:
                return False
        elif value != expected:
            return False
    return True


def pattern_for(entry: FileEntry, options: PermalinksConfig) -> Optional[str]:
    for linkset in options.linksets:
        if linkset_matches(linkset.match, entry.metadata):
            return linkset.pattern
    return options.pattern


def placeholder_value(entry: FileEntry, key: str, options: PermalinksConfig) -> str:
    value = entry.metadata.get(key)
    if value is None and key == "slug":
        value = PurePosixPath(entry.path).stem
    if value is None and key == "basename":
        value = PurePosixPath(entry.path).stem
    if value is None or value == "":
        raise PermalinkError(f"{entry.path}: no value for permalink placeholder ':{key}'")
    if isinstance(value, dt.datetime):
        return value.strftime(options.date_format)
    if isinstance(value, list):
        value = value[0] if value else ""
    slug = slugify(str(value))
    if not slug:
        raise PermalinkError(f"{entry.path}: permalink placeholder ':{key}' is empty after slugifying {value!r}")
    return slug


def expand_pattern(entry: FileEntry, pattern: str, options: PermalinksConfig) -> str:
    expanded = PLACEHOLDER_RE.sub(lambda m: placeholder_value(entry, m.group(1), options), pattern)
    parts = [part for part in expanded.split("/") if part and part not in {".", ".."}]
    if not parts:
        return "index.html"
    return "/".join(parts) + "/index.html"


def apply_permalinks(files: dict[str, FileEntry], options: PermalinksConfig, site: Site) -> dict[str, FileEntry]:
    """Move HTML entries to ``<pattern>/index.html`` and record their URLs.

    With no pattern and no matching linkset an entry keeps its path.
    """
    for entry in list(files.values()):
        if not is_html(entry.path) or entry.metadata.get("asset"):
            continue
        pattern = pattern_for(entry, options)
        if pattern and entry.metadata.get("permalink") is not False:
            rename_entry(files, entry, expand_pattern(entry, pattern, options))
        entry.metadata["permalink"] = url_for(entry.path)
    return files
