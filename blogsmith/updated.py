from __future__ import annotations

import datetime as dt

from .files import FileEntry, Site


def annotate_updated(files: dict[str, FileEntry], options: None, site: Site) -> dict[str, FileEntry]:
    for entry in files.values():
        if isinstance(entry.metadata.get("updated"), dt.datetime):
            continue
        if entry.mtime is not None:
            entry.metadata["updated"] = dt.datetime.fromtimestamp(entry.mtime, dt.timezone.utc).replace(
                tzinfo=None, microsecond=0
            )
    return files
