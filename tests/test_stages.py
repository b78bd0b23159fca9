from __future__ import annotations

import datetime as dt

import pytest

from blogsmith.assets import copy_assets
from blogsmith.config import AssetsConfig, Linkset, PermalinksConfig
from blogsmith.errors import DuplicatePathError, PermalinkError
from blogsmith.files import FileEntry, Site
from blogsmith.permalinks import apply_permalinks
from blogsmith.updated import annotate_updated

from conftest import write_tree


def test_updated_comes_from_mtime():
    entry = FileEntry("a.html", b"<p>x</p>", {}, mtime=0.0)
    annotate_updated({"a.html": entry}, None, Site())
    assert entry.metadata["updated"] == dt.datetime(1970, 1, 1)
    assert entry.contents == b"<p>x</p>"


def test_updated_front_matter_wins():
    stamp = dt.datetime(2021, 5, 1)
    entry = FileEntry("a.html", b"", {"updated": stamp}, mtime=0.0)
    annotate_updated({"a.html": entry}, None, Site())
    assert entry.metadata["updated"] == stamp


def test_assets_keep_relative_paths(tmp_path):
    source = write_tree(tmp_path / "assets", {"css/site.css": "body {}", "img/logo.png": b"\x89PNG"})
    files = copy_assets({}, AssetsConfig(source=source, destination="static"), Site())
    assert sorted(files) == ["static/css/site.css", "static/img/logo.png"]
    assert files["static/img/logo.png"].contents == b"\x89PNG"


def test_assets_do_not_replace_by_default(tmp_path):
    source = write_tree(tmp_path / "assets", {"robots.txt": "from assets"})
    existing = FileEntry("robots.txt", b"from source")
    files = copy_assets({"robots.txt": existing}, AssetsConfig(source=source, destination=""), Site())
    assert files["robots.txt"] is existing

    files = copy_assets(files, AssetsConfig(source=source, destination="", replace="all"), Site())
    assert files["robots.txt"].contents == b"from assets"


def test_assets_disabled_without_source():
    files = {"a.html": FileEntry("a.html", b"")}
    assert copy_assets(files, AssetsConfig(), Site()) == files


def test_missing_assets_directory_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_assets({}, AssetsConfig(source=tmp_path / "nope"), Site())


def test_default_permalinks_are_identity(entries):
    files = entries(("a.html", {"title": "A"}), ("writings/b.html", {"title": "B"}), "style.css")
    result = apply_permalinks(files, PermalinksConfig(), Site())
    assert sorted(result) == ["a.html", "style.css", "writings/b.html"]
    assert result["writings/b.html"].metadata["permalink"] == "/writings/b.html"
    assert "permalink" not in result["style.css"].metadata


def test_pattern_moves_html_to_index(entries):
    files = entries(("a.html", {"title": "Hello World", "date": dt.datetime(2020, 1, 2)}))
    result = apply_permalinks(files, PermalinksConfig(pattern=":date/:title"), Site())
    assert list(result) == ["2020/01/02/hello-world/index.html"]
    assert result["2020/01/02/hello-world/index.html"].metadata["permalink"] == "/2020/01/02/hello-world/"


def test_slug_falls_back_to_file_stem(entries):
    files = entries(("writings/My Post.html", {}))
    result = apply_permalinks(files, PermalinksConfig(pattern=":slug"), Site())
    assert list(result) == ["my-post/index.html"]


def test_linksets_and_opt_out(entries):
    files = entries(
        ("post.html", {"title": "Post", "collection": ["writings"]}),
        ("about.html", {"title": "About"}),
        ("keep.html", {"title": "Keep", "collection": ["writings"], "permalink": False}),
    )
    options = PermalinksConfig(linksets=(Linkset(match={"collection": "writings"}, pattern="posts/:title"),))
    result = apply_permalinks(files, options, Site())
    assert sorted(result) == ["about.html", "keep.html", "posts/post/index.html"]


def test_missing_placeholder_fails(entries):
    with pytest.raises(PermalinkError):
        apply_permalinks(entries(("a.html", {})), PermalinksConfig(pattern=":title"), Site())


def test_placeholder_that_slugifies_to_nothing_fails(entries):
    with pytest.raises(PermalinkError):
        apply_permalinks(entries(("a.html", {"title": "???"})), PermalinksConfig(pattern=":title"), Site())


def test_permalink_collision_fails(entries):
    files = entries(("a.html", {"title": "Same"}), ("b.html", {"title": "Same"}))
    with pytest.raises(DuplicatePathError):
        apply_permalinks(files, PermalinksConfig(pattern=":title"), Site())
