from __future__ import annotations

from .files import FileEntry, Site


def remove_drafts(files: dict[str, FileEntry], options: None, site: Site) -> dict[str, FileEntry]:
    return {path: entry for path, entry in files.items() if not entry.metadata.get("draft", False)}
