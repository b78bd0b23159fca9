from __future__ import annotations

import datetime as dt
import html as html_lib
import re

import yaml

from .errors import FrontMatterError
from .utils import FALSE_WORDS, TRUE_WORDS, parse_list

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")

SCALAR_TYPES = (str, bool, int, float, dt.datetime)
DATE_KEYS = ("date", "updated")


def split_front_matter(text: str) -> tuple[str, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return "", clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() in {"---", "..."}:
            end = i
            break
    if end is None:
        return "", clean_text
    return "\n".join(lines[1:end]), "\n".join(lines[end + 1 :])


def parse_front_matter(text: str, path: str = "<string>") -> tuple[dict, str]:
    """Split ``text`` into validated metadata and the Markdown body.

    The block between the leading ``---`` lines is YAML. Values are limited to
    strings, numbers, booleans, datetimes and lists of those; ``date`` and
    ``updated`` always come back as :class:`datetime.datetime` and ``draft`` as a
    bool.
    """
    raw, body = split_front_matter(text)
    if not raw.strip():
        return {}, body
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise FrontMatterError(path, f"invalid front matter: {exc}") from exc
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise FrontMatterError(path, "front matter must be a mapping")

    meta = {}
    for key, value in data.items():
        key = str(key).strip()
        if value is None:
            continue
        meta[key] = normalize_value(path, key, value)

    for key in DATE_KEYS:
        if key in meta:
            meta[key] = coerce_datetime(path, key, meta[key])
    if "draft" in meta:
        meta["draft"] = coerce_draft(path, meta["draft"])
    if isinstance(meta.get("tags"), str):
        meta["tags"] = parse_list(meta["tags"])
    return meta, body


def normalize_value(path: str, key: str, value: object) -> object:
    if isinstance(value, list):
        return [normalize_value(path, key, item) for item in value if item is not None]
    if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return dt.datetime.combine(value, dt.time.min)
    if isinstance(value, SCALAR_TYPES):
        return value
    raise FrontMatterError(path, f"unsupported value for '{key}': {type(value).__name__}")


def coerce_datetime(path: str, key: str, value: object) -> dt.datetime:
    parsed = None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = dt.datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = dt.datetime.combine(dt.date.fromisoformat(text), dt.time.min)
            except ValueError:
                parsed = None
    if parsed is None:
        raise FrontMatterError(path, f"'{key}' is not a valid date: {value!r}")
    # Naive UTC throughout so dates from different posts stay comparable.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return parsed


def coerce_draft(path: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    raise FrontMatterError(path, f"'draft' must be a boolean, got {value!r}")


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    if meta.get("title"):
        return str(meta["title"]), body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def normalize_list_spacing(text: str) -> str:
    # GFM starts a list right after a paragraph line; Python-Markdown wants a blank line.
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def count_words(text: str) -> int:
    return len(WORD_RE.findall(html_lib.unescape(text)))
