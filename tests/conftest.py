# ABOUTME: Shared pytest fixtures for md2epub tests.
# ABOUTME: Provides sample book directories and isolates tests from real config files.

from datetime import datetime, timezone
from pathlib import Path

import pytest

from md2epub.core.types import BuildIdentifiers
from md2epub.metadata import BookMetadata

FAKE_JPG = b"\xff\xd8\xff\xe0fake jpg"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake png"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the system config path at empty temp locations."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(
        "md2epub.config.SYSTEM_CONFIG_PATH", tmp_path / "etc" / "md2epub.json"
    )
    return home


@pytest.fixture
def book_dir(tmp_path: Path) -> Path:
    """Create a small book directory.

    Layout:
        My Book/
            b.md        "# Second" heading, companion b.png not referenced
            a.md        "# First Chapter" heading
            c.md        no heading, already references c.jpg
            b.png
            c.jpg
            cover.jpg
            notes.txt   ignored
    """
    root = tmp_path / "My Book"
    root.mkdir()

    # Written out of order on purpose; discovery sorts by name.
    (root / "b.md").write_text("# Second\n\nBody of b.\n", encoding="utf-8")
    (root / "a.md").write_text("# First Chapter\n\nHello world.\n", encoding="utf-8")
    (root / "c.md").write_text("No heading here.\n\n![Scene](c.jpg)\n", encoding="utf-8")
    (root / "b.png").write_bytes(FAKE_PNG)
    (root / "c.jpg").write_bytes(FAKE_JPG)
    (root / "cover.jpg").write_bytes(FAKE_JPG)
    (root / "notes.txt").write_text("not part of the book", encoding="utf-8")
    return root


@pytest.fixture
def chinese_book_dir(tmp_path: Path) -> Path:
    """A one-chapter book whose paragraphs wrap mid-sentence."""
    root = tmp_path / "zh-book"
    root.mkdir()
    (root / "01.md").write_text(
        "# 第一章\n\n你\n好\n\nend\nof sentence\n", encoding="utf-8"
    )
    (root / "cover.jpg").write_bytes(FAKE_JPG)
    return root


@pytest.fixture
def metadata() -> BookMetadata:
    return BookMetadata(
        title="My Book",
        author="Jane Doe",
        language="en",
        cover_image="cover.jpg",
        description="A short book.",
        tags=["fiction", "test"],
    )


@pytest.fixture
def identifiers() -> BuildIdentifiers:
    return BuildIdentifiers(
        uid="12345678-1234-5678-1234-567812345678",
        timestamp=datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc),
    )
