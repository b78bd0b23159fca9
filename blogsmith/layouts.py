from __future__ import annotations

import datetime as dt
import html
from pathlib import Path

from .config import LayoutsConfig
from .errors import LayoutNotFoundError
from .files import FileEntry, Site, is_html, match_pattern, url_for
from .render import render_template
from .utils import DATE_FMT, iso_date

NAV_KEYS = ("previous", "next")


def format_value(value: object) -> str:
    if isinstance(value, dt.datetime):
        return value.strftime(DATE_FMT)
    if isinstance(value, list):
        return ", ".join(format_value(item) for item in value)
    return str(value)


def build_collection_list(site: Site, name: str) -> str:
    items = []
    for entry in site.collections[name].entries:
        title = html.escape(str(entry.metadata.get("title", entry.path)))
        date = entry.metadata.get("date")
        date_html = f' <time datetime="{iso_date(date)}">{date.strftime(DATE_FMT)}</time>' if date else ""
        items.append(f'<li><a href="{url_for(entry.path)}">{title}</a>{date_html}</li>')
    return f'<ul class="collection collection-{html.escape(name)}">' + "".join(items) + "</ul>"


def build_context(entry: FileEntry, site: Site) -> dict[str, str]:
    context = {}
    for key, value in site.metadata.items():
        if isinstance(value, (str, int, float, bool)):
            context[f"site_{key}"] = html.escape(str(value))
    for name in site.collections:
        context[f"collection_{name}"] = build_collection_list(site, name)
    for key, value in entry.metadata.items():
        if isinstance(value, (dict, FileEntry)) or key in {"toc", "content"}:
            continue
        context[key] = html.escape(format_value(value))
    for key in ("date", "updated"):
        value = entry.metadata.get(key)
        if isinstance(value, dt.datetime):
            context[f"{key}_iso"] = iso_date(value)
    for key in NAV_KEYS:
        neighbour = entry.metadata.get(key)
        if isinstance(neighbour, FileEntry):
            context[f"{key}_url"] = url_for(neighbour.path)
            context[f"{key}_title"] = html.escape(str(neighbour.metadata.get("title", neighbour.path)))
        else:
            context[f"{key}_url"] = ""
            context[f"{key}_title"] = ""
    context["toc"] = str(entry.metadata.get("toc", ""))
    context["url"] = url_for(entry.path)
    context["content"] = entry.text
    return context


def apply_layouts(files: dict[str, FileEntry], options: LayoutsConfig, site: Site) -> dict[str, FileEntry]:
    """Wrap HTML entries in the template named by their ``layout`` metadata.

    Templates live in ``options.directory`` and use ``{{key}}`` placeholders.
    Entries without a layout fall back to ``options.default``; with neither, or
    with ``layout: false``, they are left as they are.
    """
    templates: dict[str, str] = {}
    for entry in files.values():
        if not is_html(entry.path) or entry.metadata.get("asset"):
            continue
        if not match_pattern(options.pattern, entry.path):
            continue
        name = entry.metadata.get("layout", options.default)
        if not name:
            continue
        name = str(name)
        if name not in templates:
            template_path = Path(options.directory) / name
            if not template_path.is_file():
                raise LayoutNotFoundError(f"Layout not found: {template_path} (used by {entry.path})")
            templates[name] = template_path.read_text(encoding="utf-8")
        entry.contents = render_template(templates[name], **build_context(entry, site)).encode("utf-8")
    return files
