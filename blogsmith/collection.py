from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from .config import CollectionConfig
from .files import FileEntry, Site, match_pattern


@dataclass
class Collection:
    name: str
    options: CollectionConfig
    entries: list[FileEntry] = field(default_factory=list)

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def sort_value(value: object) -> tuple:
    # Rank by kind first so mixed value types never get compared directly.
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, dt.datetime):
        return (2, value)
    return (3, str(value).lower())


def is_member(entry: FileEntry, options: CollectionConfig) -> bool:
    if options.pattern and match_pattern(options.pattern, entry.path):
        return True
    declared = entry.metadata.get("collection")
    if isinstance(declared, str):
        declared = [declared]
    return isinstance(declared, list) and options.name in declared


def order_entries(entries: list[FileEntry], options: CollectionConfig) -> list[FileEntry]:
    entries = sorted(entries, key=lambda entry: entry.path)
    if not options.sort_by:
        return list(reversed(entries)) if options.reverse else entries
    keyed = [entry for entry in entries if entry.metadata.get(options.sort_by) is not None]
    missing = [entry for entry in entries if entry.metadata.get(options.sort_by) is None]
    keyed.sort(key=lambda entry: sort_value(entry.metadata[options.sort_by]), reverse=options.reverse)
    return keyed + missing


def group_collections(
    files: dict[str, FileEntry], options: tuple[CollectionConfig, ...], site: Site
) -> dict[str, FileEntry]:
    """Group entries into the configured collections.

    Members get ``collection`` (names) and ``collection_index`` (position per
    collection). Collections with ``refer`` enabled also link neighbours through
    ``previous`` and ``next``. Entries without the sort field go last.
    """
    for entry in files.values():
        declared = entry.metadata.get("collection")
        if isinstance(declared, str):
            entry.metadata["collection"] = [declared]

    for collection_options in options:
        members = [entry for entry in files.values() if is_member(entry, collection_options)]
        ordered = order_entries(members, collection_options)
        name = collection_options.name
        for index, entry in enumerate(ordered):
            names = entry.metadata.setdefault("collection", [])
            if name not in names:
                names.append(name)
            entry.metadata.setdefault("collection_index", {})[name] = index
            if collection_options.refer:
                if index > 0:
                    entry.metadata["previous"] = ordered[index - 1]
                if index < len(ordered) - 1:
                    entry.metadata["next"] = ordered[index + 1]
        site.collections[name] = Collection(name=name, options=collection_options, entries=ordered)
    return files
