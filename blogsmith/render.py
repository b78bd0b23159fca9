from __future__ import annotations

import re
from pathlib import PurePosixPath

import markdown
from pygments.formatters import HtmlFormatter

from .config import MarkdownConfig
from .content import count_words, extract_title, normalize_list_spacing
from .errors import DuplicatePathError
from .files import FileEntry, Site, is_markdown, rename_entry

TAG_RE = re.compile(r"<[^>]+>")
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
SUMMARY_LENGTH = 200


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def render_template(template: str, **context: str) -> str:
    # Single pass: substituted values are never scanned for placeholders again.
    return PLACEHOLDER_RE.sub(lambda match: context.get(match.group(1), match.group(0)), template)


def markdown_extensions(options: MarkdownConfig) -> tuple[list[str], dict]:
    extensions = []
    configs = {}
    if options.gfm:
        extensions.extend(["fenced_code", "sane_lists"])
    if options.tables:
        extensions.append("tables")
    if options.highlight:
        extensions.append("codehilite")
        configs["codehilite"] = {"guess_lang": False, "css_class": "codehilite"}
    if options.toc:
        extensions.append("toc")
    return extensions, configs


def html_path(path: str) -> str:
    return PurePosixPath(path).with_suffix(".html").as_posix()


def render_markdown(files: dict[str, FileEntry], options: MarkdownConfig, site: Site) -> dict[str, FileEntry]:
    extensions, configs = markdown_extensions(options)
    for entry in [entry for entry in files.values() if is_markdown(entry.path)]:
        meta = entry.metadata
        title, body = extract_title(meta, entry.text)
        if options.gfm:
            body = normalize_list_spacing(body)
        md = markdown.Markdown(extensions=extensions, extension_configs=configs)
        html_content = md.convert(body)
        if options.toc:
            meta["toc"] = md.toc
        text = strip_tags(html_content).strip().replace("\n", " ")
        meta["title"] = title
        if not meta.get("summary"):
            meta["summary"] = meta.get("description") or (
                text[:SUMMARY_LENGTH] + ("..." if len(text) > SUMMARY_LENGTH else "")
            )
        meta["words"] = count_words(text)
        entry.contents = html_content.encode("utf-8")
        rename_entry(files, entry, html_path(entry.path))
    if options.highlight and options.highlight_css:
        add_highlight_stylesheet(files, options)
    return files


def add_highlight_stylesheet(files: dict[str, FileEntry], options: MarkdownConfig) -> None:
    path = options.highlight_css.strip("/")
    if path in files:
        raise DuplicatePathError(path, "<highlight stylesheet>")
    formatter = HtmlFormatter(style=options.highlight_style, cssclass="codehilite")
    css = formatter.get_style_defs(".codehilite")
    files[path] = FileEntry(path=path, contents=(css + "\n").encode("utf-8"), metadata={"asset": True})
