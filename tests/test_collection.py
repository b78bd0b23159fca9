from __future__ import annotations

import datetime as dt

from blogsmith.collection import group_collections
from blogsmith.config import CollectionConfig
from blogsmith.drafts import remove_drafts
from blogsmith.files import Site

WRITINGS = CollectionConfig(name="writings", pattern="writings/**/*.md", sort_by="date", reverse=True)
PAGES = CollectionConfig(name="pages", pattern="pages/**/*.md", refer=False)


def test_drafts_are_removed(entries):
    files = entries(("a.md", {"draft": True}), ("b.md", {"draft": False}), "c.png")
    assert sorted(remove_drafts(files, None, Site())) == ["b.md", "c.png"]


def test_posts_sorted_newest_first(entries):
    files = entries(
        ("writings/hello.md", {"date": dt.datetime(2016, 8, 27)}),
        ("writings/reduce.md", {"date": dt.datetime(2017, 8, 30)}),
        ("writings/textarea.md", {"date": dt.datetime(2017, 9, 5)}),
    )
    site = Site()
    group_collections(files, (WRITINGS,), site)
    ordered = [entry.metadata["date"] for entry in site.collections["writings"]]
    assert ordered == [dt.datetime(2017, 9, 5), dt.datetime(2017, 8, 30), dt.datetime(2016, 8, 27)]
    assert files["writings/textarea.md"].metadata["collection_index"] == {"writings": 0}
    assert files["writings/hello.md"].metadata["collection"] == ["writings"]


def test_refer_links_neighbours(entries):
    files = entries(
        ("writings/a.md", {"date": dt.datetime(2020, 1, 1)}),
        ("writings/b.md", {"date": dt.datetime(2020, 2, 1)}),
    )
    group_collections(files, (WRITINGS,), Site())
    newest, oldest = files["writings/b.md"], files["writings/a.md"]
    assert newest.metadata["next"] is oldest
    assert oldest.metadata["previous"] is newest
    assert "previous" not in newest.metadata
    assert "next" not in oldest.metadata


def test_pages_are_not_linked(entries):
    files = entries("pages/about.md", "pages/contact.md", "index.md")
    site = Site()
    group_collections(files, (PAGES,), site)
    assert [entry.path for entry in site.collections["pages"]] == ["pages/about.md", "pages/contact.md"]
    assert all("previous" not in e.metadata and "next" not in e.metadata for e in files.values())
    assert files["index.md"].metadata == {}


def test_missing_sort_field_goes_last(entries):
    files = entries(
        ("writings/undated.md", {}),
        ("writings/old.md", {"date": dt.datetime(2019, 1, 1)}),
        ("writings/new.md", {"date": dt.datetime(2020, 1, 1)}),
    )
    site = Site()
    group_collections(files, (WRITINGS,), site)
    assert [e.path for e in site.collections["writings"]] == [
        "writings/new.md",
        "writings/old.md",
        "writings/undated.md",
    ]


def test_mixed_sort_values_do_not_crash(entries):
    files = entries(
        ("writings/a.md", {"date": "soon"}),
        ("writings/b.md", {"date": dt.datetime(2020, 1, 1)}),
    )
    site = Site()
    group_collections(files, (WRITINGS,), site)
    assert len(site.collections["writings"]) == 2


def test_front_matter_collection_membership(entries):
    files = entries(("extra/note.md", {"collection": "pages"}), "pages/about.md")
    site = Site()
    group_collections(files, (PAGES,), site)
    assert [e.path for e in site.collections["pages"]] == ["extra/note.md", "pages/about.md"]
    assert files["extra/note.md"].metadata["collection"] == ["pages"]


def test_date_is_the_default_sort_field(entries):
    files = entries(
        ("notes/b.md", {}),
        ("notes/c.md", {"date": dt.datetime(2018, 1, 1)}),
        ("notes/a.md", {}),
        ("notes/d.md", {"date": dt.datetime(2017, 1, 1)}),
    )
    site = Site()
    group_collections(files, (CollectionConfig(name="notes", pattern="notes/*.md"),), site)
    assert [e.path for e in site.collections["notes"]] == ["notes/d.md", "notes/c.md", "notes/a.md", "notes/b.md"]
