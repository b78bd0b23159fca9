from __future__ import annotations

from pathlib import Path

from .config import AssetsConfig
from .files import FileEntry, Site


def list_files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted((path for path in root.rglob("*") if path.is_file()), key=lambda p: p.as_posix())


def copy_assets(files: dict[str, FileEntry], options: AssetsConfig, site: Site) -> dict[str, FileEntry]:
    if options.source is None:
        return files
    if not options.source.is_dir():
        raise FileNotFoundError(f"Assets directory not found: {options.source}")
    for path in list_files(options.source):
        rel = path.relative_to(options.source).as_posix()
        target = f"{options.destination}/{rel}" if options.destination else rel
        if target in files and options.replace == "none":
            continue
        files[target] = FileEntry(
            path=target,
            contents=path.read_bytes(),
            metadata={"asset": True},
            mtime=path.stat().st_mtime,
        )
    return files
