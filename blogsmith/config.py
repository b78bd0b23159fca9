from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from .errors import ConfigError
from .utils import parse_bool

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

REPLACE_MODES = ("none", "all")


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be an object: {path}", file=sys.stderr)
        sys.exit(1)
    return data


@dataclass(frozen=True)
class CollectionConfig:
    name: str
    pattern: Optional[str] = None
    sort_by: Optional[str] = "date"
    reverse: bool = False
    refer: bool = True


@dataclass(frozen=True)
class MarkdownConfig:
    gfm: bool = True
    tables: bool = True
    highlight: bool = True
    highlight_style: str = "default"
    highlight_css: Optional[str] = None
    toc: bool = False


@dataclass(frozen=True)
class AssetsConfig:
    source: Optional[Path] = None
    destination: str = "assets"
    replace: str = "none"


@dataclass(frozen=True)
class Linkset:
    match: Mapping[str, object]
    pattern: str


@dataclass(frozen=True)
class PermalinksConfig:
    pattern: Optional[str] = None
    date_format: str = "%Y/%m/%d"
    linksets: tuple[Linkset, ...] = ()


@dataclass(frozen=True)
class LayoutsConfig:
    directory: Path = Path("layouts")
    default: Optional[str] = None
    pattern: str = "**/*.html"


@dataclass(frozen=True)
class TagsConfig:
    handle: str = "tags"
    path: str = "topics/:tag.html"
    layout: Optional[str] = None


@dataclass(frozen=True)
class BuildConfiguration:
    source: Path = Path("src")
    destination: Path = Path("build")
    clean: bool = True
    ignore: tuple[str, ...] = ()
    metadata: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    collections: tuple[CollectionConfig, ...] = ()
    markdown: MarkdownConfig = MarkdownConfig()
    assets: AssetsConfig = AssetsConfig()
    permalinks: PermalinksConfig = PermalinksConfig()
    layouts: LayoutsConfig = LayoutsConfig()
    tags: TagsConfig = TagsConfig()


def _section(data: Mapping, key: str) -> Mapping:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{key}' must be a table, got {type(value).__name__}")
    return value


def _optional_str(section: Mapping, key: str, where: str) -> Optional[str]:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{where}.{key}' must be a string")
    return value


def _resolve(root: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else root / path


def build_collections(data: Mapping) -> tuple[CollectionConfig, ...]:
    collections = []
    for name, options in _section(data, "collections").items():
        if isinstance(options, str):
            options = {"pattern": options}
        if not isinstance(options, Mapping):
            raise ConfigError(f"collection '{name}' must be a table or a pattern string")
        where = f"collections.{name}"
        sort_by = options.get("sortBy", options.get("sort_by", "date"))
        if sort_by is not None and not isinstance(sort_by, str):
            raise ConfigError(f"'{where}.sortBy' must be a string")
        collections.append(
            CollectionConfig(
                name=str(name),
                pattern=_optional_str(options, "pattern", where),
                sort_by=sort_by,
                reverse=parse_bool(options.get("reverse", False)),
                refer=parse_bool(options.get("refer", True)),
            )
        )
    return tuple(collections)


def build_permalinks(data: Mapping) -> PermalinksConfig:
    section = _section(data, "permalinks")
    linksets = []
    for item in section.get("linksets") or []:
        if not isinstance(item, Mapping) or not isinstance(item.get("pattern"), str):
            raise ConfigError("each permalinks linkset needs a 'pattern' string")
        match = item.get("match") or {}
        if not isinstance(match, Mapping):
            raise ConfigError("permalinks linkset 'match' must be a table")
        linksets.append(Linkset(match=MappingProxyType(dict(match)), pattern=item["pattern"]))
    return PermalinksConfig(
        pattern=_optional_str(section, "pattern", "permalinks"),
        date_format=_optional_str(section, "date_format", "permalinks") or "%Y/%m/%d",
        linksets=tuple(linksets),
    )


def build_configuration(data: Mapping, root: Optional[Path] = None) -> BuildConfiguration:
    """Validate a parsed config mapping and freeze it into a BuildConfiguration.

    Relative directories are resolved against ``root`` (usually the directory
    holding the config file).
    """
    root = Path(root) if root is not None else Path.cwd()

    markdown_section = _section(data, "markdown")
    markdown = MarkdownConfig(
        gfm=parse_bool(markdown_section.get("gfm", True)),
        tables=parse_bool(markdown_section.get("tables", True)),
        highlight=parse_bool(markdown_section.get("highlight", True)),
        highlight_style=_optional_str(markdown_section, "highlight_style", "markdown") or "default",
        highlight_css=_optional_str(markdown_section, "highlight_css", "markdown"),
        toc=parse_bool(markdown_section.get("toc", False)),
    )

    assets_section = _section(data, "assets")
    assets_source = _optional_str(assets_section, "source", "assets")
    replace = str(assets_section.get("replace", "none")).lower()
    if replace not in REPLACE_MODES:
        raise ConfigError(f"'assets.replace' must be one of {', '.join(REPLACE_MODES)}")
    assets = AssetsConfig(
        source=_resolve(root, assets_source) if assets_source else None,
        destination=(_optional_str(assets_section, "destination", "assets") or "assets").strip("/"),
        replace=replace,
    )

    layouts_section = _section(data, "layouts")
    layouts = LayoutsConfig(
        directory=_resolve(root, _optional_str(layouts_section, "directory", "layouts") or "layouts"),
        default=_optional_str(layouts_section, "default", "layouts"),
        pattern=_optional_str(layouts_section, "pattern", "layouts") or "**/*.html",
    )

    tags_section = _section(data, "tags")
    tags = TagsConfig(
        handle=_optional_str(tags_section, "handle", "tags") or "tags",
        path=_optional_str(tags_section, "path", "tags") or "topics/:tag.html",
        layout=_optional_str(tags_section, "layout", "tags"),
    )

    ignore = data.get("ignore") or []
    if isinstance(ignore, str):
        ignore = [ignore]
    if not all(isinstance(item, str) for item in ignore):
        raise ConfigError("'ignore' must be a list of glob strings")

    return BuildConfiguration(
        source=_resolve(root, _optional_str(data, "source", "config") or "src"),
        destination=_resolve(root, _optional_str(data, "destination", "config") or "build"),
        clean=parse_bool(data.get("clean", True)),
        ignore=tuple(ignore),
        metadata=MappingProxyType(dict(_section(data, "metadata"))),
        collections=build_collections(data),
        markdown=markdown,
        assets=assets,
        permalinks=build_permalinks(data),
        layouts=layouts,
        tags=tags,
    )
