from __future__ import annotations

import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from .assets import copy_assets, list_files
from .collection import group_collections
from .config import BuildConfiguration
from .content import parse_front_matter
from .drafts import remove_drafts
from .errors import FrontMatterError, SourceNotFoundError, StageError, WriteError
from .files import FileEntry, Site, is_markdown, match_pattern
from .layouts import apply_layouts
from .permalinks import apply_permalinks
from .render import render_markdown
from .updated import annotate_updated


class Stage(NamedTuple):
    name: str
    section: Optional[str]
    run: Callable[[dict, object, Site], dict]


# Tag indexing is configurable (``BuildConfiguration.tags``) but deliberately not
# part of the chain.
STAGES: tuple[Stage, ...] = (
    Stage("drafts", None, remove_drafts),
    Stage("collections", "collections", group_collections),
    Stage("markdown", "markdown", render_markdown),
    Stage("updated", None, annotate_updated),
    Stage("assets", "assets", copy_assets),
    Stage("permalinks", "permalinks", apply_permalinks),
    Stage("layouts", "layouts", apply_layouts),
)


def load_source(source: Path, ignore: tuple[str, ...] = ()) -> dict[str, FileEntry]:
    files = {}
    for path in list_files(source):
        rel = path.relative_to(source).as_posix()
        if any(match_pattern(pattern, rel) for pattern in ignore):
            continue
        contents = path.read_bytes()
        metadata = {}
        if is_markdown(rel):
            try:
                text = contents.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise FrontMatterError(rel, f"not valid UTF-8: {exc}") from exc
            metadata, body = parse_front_matter(text, rel)
            contents = body.encode("utf-8")
        files[rel] = FileEntry(path=rel, contents=contents, metadata=metadata, mtime=path.stat().st_mtime)
    return files


def run_stages(
    files: dict[str, FileEntry], config: BuildConfiguration, site: Site, verbose: bool = False
) -> dict[str, FileEntry]:
    for stage in STAGES:
        options = getattr(config, stage.section) if stage.section else None
        start = time.perf_counter()
        try:
            result = stage.run(files, options, site)
        except Exception as exc:
            raise StageError(stage.name, exc) from exc
        if not isinstance(result, dict):
            raise StageError(stage.name, TypeError(f"stage returned {type(result).__name__}, expected a dict"))
        files = result
        if verbose:
            elapsed = time.perf_counter() - start
            print(f"[{stage.name}] {len(files)} files ({elapsed:.3f}s)", file=sys.stderr)
    return files


def write_output(files: dict[str, FileEntry], destination: Path, clean: bool = True) -> list[str]:
    """Write ``files`` under ``destination`` in one swap.

    Everything is written to a sibling temporary directory first; the old
    destination is only replaced once that succeeded.
    """
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{destination.name}-", dir=destination.parent))
        staging.chmod(0o755)
    except OSError as exc:
        raise WriteError(f"Cannot prepare output directory {destination}: {exc}") from exc

    written = sorted(files)
    backup = None
    try:
        if not clean and destination.is_dir():
            shutil.copytree(destination, staging, dirs_exist_ok=True)
        for rel in written:
            target = staging / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(files[rel].contents)
        if destination.exists():
            backup = staging.with_name(staging.name + ".old")
            destination.rename(backup)
            try:
                staging.rename(destination)
            except OSError:
                backup.rename(destination)
                raise
        else:
            staging.rename(destination)
    except OSError as exc:
        shutil.rmtree(staging, ignore_errors=True)
        raise WriteError(f"Cannot write output to {destination}: {exc}") from exc
    if backup is not None:
        try:
            shutil.rmtree(backup)
        except OSError as exc:
            print(f"Warning: could not remove previous output {backup}: {exc}", file=sys.stderr)
    return written


def build(source: Path, destination: Path, config: BuildConfiguration, verbose: bool = False) -> list[str]:
    """Build the site from ``source`` into ``destination``.

    Returns the written paths, relative to ``destination``. Raises a
    :class:`~blogsmith.errors.BuildError` subclass on failure, in which case
    ``destination`` is left as it was.
    """
    source = Path(source)
    if not source.is_dir():
        raise SourceNotFoundError(source)
    try:
        files = load_source(source, config.ignore)
    except OSError as exc:
        raise SourceNotFoundError(source) from exc

    site = Site(metadata=dict(config.metadata))
    files = run_stages(files, config, site, verbose=verbose)
    return write_output(files, Path(destination), clean=config.clean)
