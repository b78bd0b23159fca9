from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from blogsmith.config import build_configuration  # noqa: E402
from blogsmith.files import FileEntry  # noqa: E402


def write_tree(root: Path, tree: dict) -> Path:
    for rel, text in tree.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def make_config(tmp_path):
    def factory(**data):
        return build_configuration(data, tmp_path)

    return factory


@pytest.fixture
def entries():
    def factory(*items):
        files = {}
        for item in items:
            path, metadata = item if isinstance(item, tuple) else (item, {})
            files[path] = FileEntry(path=path, contents=b"", metadata=dict(metadata))
        return files

    return factory
