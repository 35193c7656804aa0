"""Shared pytest fixtures for sdlppx tests.

Builds real project packages (zip archives) and SQLite termbase and
translation memory stores in temporary folders.
"""

import sqlite3
import zipfile
from collections.abc import Iterable
from pathlib import Path

import pytest

# ============================================================================
# Sample documents
# ============================================================================

DESCRIPTOR_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<PackageProject Guid="7c3f" Name="demo" PackageType="{package_type}">
  <LanguageDirections>
{directions}
  </LanguageDirections>
</PackageProject>
"""

DIRECTION_TEMPLATE = (
    '    <LanguageDirection Guid="d{index}" SourceLanguageCode="en-US" '
    'TargetLanguageCode="{language}" />'
)


def make_descriptor(
    package_type: str = "ProjectPackage", targets: Iterable[str] = ("fr-FR",)
) -> bytes:
    """Build the content of a project descriptor."""
    directions = "\n".join(
        DIRECTION_TEMPLATE.format(index=index, language=language)
        for index, language in enumerate(targets)
    )
    return DESCRIPTOR_TEMPLATE.format(package_type=package_type, directions=directions).encode(
        "utf-8"
    )


SOURCE_SEGMENT = (
    "<Segment>"
    "<Elements>"
    "<Text><Value>Hello </Value></Text>"
    "<Tag><Type>Start</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor>"
    "<TagID>b1</TagID></Tag>"
    "<Text><Value>world</Value></Text>"
    "<Tag><Type>End</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor>"
    "<TagID>b1</TagID></Tag>"
    "<Text><Value>!</Value></Text>"
    "<Tag><Type>Standalone</Type><Anchor>2</Anchor><AlignmentAnchor>2</AlignmentAnchor>"
    "<TagID>x2</TagID></Tag>"
    "</Elements>"
    "<CultureName>en-US</CultureName>"
    "</Segment>"
)

TARGET_SEGMENT = (
    "<Segment>"
    "<Elements>"
    "<Text><Value>Bonjour </Value></Text>"
    "<Tag><Type>Start</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor>"
    "<TagID>b1</TagID></Tag>"
    "<Text><Value>monde</Value></Text>"
    "<Tag><Type>End</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor>"
    "<TagID>b1</TagID></Tag>"
    "<Text><Value>!</Value></Text>"
    "<Tag><Type>Standalone</Type><Anchor>2</Anchor><AlignmentAnchor>2</AlignmentAnchor>"
    "<TagID>x2</TagID></Tag>"
    "</Elements>"
    "<CultureName>fr-FR</CultureName>"
    "</Segment>"
)


def plain_segment(text: str, language: str) -> str:
    """Segment document holding a single text run."""
    return (
        f"<Segment><Elements><Text><Value>{text}</Value></Text></Elements>"
        f"<CultureName>{language}</CultureName></Segment>"
    )


CONCEPT_PROTON = """<cG>
  <c>1</c>
  <trG><tr type="origination">jdoe</tr><dt>2020-01-01T10:00:00</dt></trG>
  <trG><tr type="modification">asmith</tr><dt>2020-02-01T10:00:00</dt></trG>
  <dG><d type="Subject">Physics</d></dG>
  <lG>
    <l type="English" lang="EN"/>
    <dG><d type="Definition">Positive particle</d></dG>
    <tG>
      <t>proton</t>
      <dG><d type="Usage example">The proton is stable.</d></dG>
    </tG>
  </lG>
  <lG>
    <l type="French (Canada)" lang="FR-CA"/>
    <dG><d type="Forbidden term">antiproton</d></dG>
    <tG><t>proton</t></tG>
  </lG>
</cG>"""

CONCEPT_ELECTRON = """<cG>
  <c>2</c>
  <trG><tr type="origination">jdoe</tr><dt>2020-03-01T10:00:00</dt></trG>
  <dG><d type="Status">approved</d></dG>
  <lG>
    <l type="English" lang="EN"/>
    <tG><t>electron</t></tG>
    <tG><t>negatron</t></tG>
  </lG>
</cG>"""


# ============================================================================
# Store builders
# ============================================================================


def build_termbase_store(path: Path, rows: Iterable[tuple[object, str]]) -> Path:
    """Write a SQLite termbase store with an ``mtConcepts`` table."""
    db = sqlite3.connect(path)
    try:
        db.execute("CREATE TABLE mtConcepts (conceptid, text TEXT)")
        db.executemany("INSERT INTO mtConcepts (conceptid, text) VALUES (?, ?)", list(rows))
        db.commit()
    finally:
        db.close()
    return path


def build_tm_store(
    path: Path,
    units: Iterable[tuple[int, str, str]],
    headers: Iterable[tuple[str, str, object]] = (("Main TM", "en-US", 4),),
) -> Path:
    """Write a SQLite translation memory store."""
    db = sqlite3.connect(path)
    try:
        db.execute(
            "CREATE TABLE translation_memories "
            "(id INTEGER PRIMARY KEY, name TEXT, source_language TEXT, tucount INTEGER)"
        )
        db.execute(
            "CREATE TABLE translation_units "
            "(id INTEGER PRIMARY KEY, source_segment TEXT, target_segment TEXT)"
        )
        db.executemany(
            "INSERT INTO translation_memories (name, source_language, tucount) VALUES (?, ?, ?)",
            list(headers),
        )
        db.executemany(
            "INSERT INTO translation_units (id, source_segment, target_segment) VALUES (?, ?, ?)",
            list(units),
        )
        db.commit()
    finally:
        db.close()
    return path


def build_package(path: Path, entries: dict[str, bytes]) -> Path:
    """Write a zip package holding the given entries."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def read_entries(path: Path) -> dict[str, bytes]:
    """Content of every entry of a zip package."""
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


# ============================================================================
# Store fixtures
# ============================================================================


@pytest.fixture
def tm_store(tmp_path: Path) -> Path:
    """Translation memory with two valid units and two malformed units."""
    return build_tm_store(
        tmp_path / "main.sdltm",
        [
            (1, SOURCE_SEGMENT, TARGET_SEGMENT),
            (2, plain_segment("Goodbye", "en-US"), plain_segment("Au revoir", "fr-FR")),
            (3, plain_segment("Broken", "en-US"), "<Segment><Elements>"),
            (4, "<Segment><Elements>", plain_segment("Casse", "fr-FR")),
        ],
    )


@pytest.fixture
def termbase_store(tmp_path: Path) -> Path:
    """Termbase with two concepts and one malformed row."""
    return build_termbase_store(
        tmp_path / "physics.sdltb",
        [
            (2, CONCEPT_ELECTRON),
            (1, CONCEPT_PROTON),
            (3, "<cG><lG>"),
        ],
    )


# ============================================================================
# Package fixtures
# ============================================================================


@pytest.fixture
def package_entries(tm_store: Path, termbase_store: Path) -> dict[str, bytes]:
    """Entries of a complete project package targeting fr-FR."""
    return {
        "project.sdlproj": make_descriptor(),
        "en-US/doc1.sdlxliff": b"<xliff>source 1</xliff>",
        "fr-FR/doc1.sdlxliff": b"<xliff>untranslated 1</xliff>",
        "fr-FR/doc2.sdlxliff": b"<xliff>untranslated 2</xliff>",
        "Tm/en-US_fr-FR/main.sdltm": tm_store.read_bytes(),
        "Termbases/physics.sdltb": termbase_store.read_bytes(),
    }


@pytest.fixture
def project_package(tmp_path: Path, package_entries: dict[str, bytes]) -> Path:
    """Project package (.sdlppx) on disk."""
    packages = tmp_path / "packages"
    packages.mkdir()
    return build_package(packages / "project.sdlppx", package_entries)


@pytest.fixture
def translated_dir(tmp_path: Path) -> Path:
    """Folder with a translation for doc1 only."""
    folder = tmp_path / "translated"
    folder.mkdir()
    (folder / "doc1.sdlxliff").write_bytes(b"<xliff>translated 1</xliff>")
    return folder


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Modify test collection to auto-mark tests based on location."""
    for item in items:
        # Auto-mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
