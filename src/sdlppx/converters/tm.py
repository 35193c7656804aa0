# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Translation memory (.sdltm) export to TMX.

A translation memory store is a SQLite database. Each translation unit row
holds its source and target segments as XML documents:
    ```xml
    <Segment>
      <Elements>
        <Text><Value>Hello </Value></Text>
        <Tag>
          <Type>Start</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor>
          <TagID>1</TagID>
        </Tag>
        <Text><Value>world</Value></Text>
        <Tag><Type>End</Type><Anchor>1</Anchor><AlignmentAnchor>1</AlignmentAnchor></Tag>
      </Elements>
      <CultureName>en-US</CultureName>
    </Segment>
    ```

Tags become TMX ``<bpt>``, ``<ept>`` and ``<ph>`` elements; anchors are
copied through unchanged.
"""

from __future__ import annotations

import logging
import os
import tempfile
import xml.etree.ElementTree as StdET  # noqa: N813
from pathlib import Path
from typing import Any

import defusedxml.ElementTree as ET  # noqa: N817

from sdlppx.core.errors import MalformedRecordError, MissingInputError
from sdlppx.core.models import (
    Segment,
    SegmentNode,
    TagKind,
    TagMarker,
    TextNode,
    TMHeader,
    TranslationUnit,
)
from sdlppx.core.store import open_row_store
from sdlppx.utils.config import Settings

logger = logging.getLogger(__name__)

HEADER_TABLE = "translation_memories"
HEADER_COLUMNS = ("name", "source_language", "tucount")
UNIT_TABLE = "translation_units"
UNIT_COLUMNS = ("id", "source_segment", "target_segment")

TMX_VERSION = "1.1"


def parse_segment(xml: str) -> Segment:
    """Parse the XML document of one segment.

    Args:
        xml: Segment document

    Returns:
        Segment with its nodes in document order

    Raises:
        ValueError: If the document is not a well-formed segment
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise ValueError(f"invalid XML: {e}") from e

    segment = root if root.tag == "Segment" else root.find(".//Segment")
    if segment is None:
        raise ValueError("no Segment element")

    language = segment.findtext(".//CultureName")
    if not language:
        raise ValueError("segment has no CultureName")

    nodes: list[SegmentNode] = []
    elements = segment.find(".//Elements")
    for item in elements if elements is not None else []:
        if item.tag == "Tag":
            nodes.append(_parse_tag(item))
        elif item.tag == "Text":
            nodes.append(TextNode(text=item.findtext(".//Value", "")))

    return Segment(language=language, nodes=nodes)


def _parse_tag(item: Any) -> TagMarker:
    tag_type = item.findtext(".//Type", "")
    anchor = item.findtext(".//Anchor", "")
    alignment_anchor = item.findtext(".//AlignmentAnchor", "")

    if tag_type == TagKind.START.value:
        return TagMarker(
            kind=TagKind.START,
            tag_id=item.findtext(".//TagID", ""),
            anchor=anchor,
            alignment_anchor=alignment_anchor,
        )
    if tag_type == TagKind.END.value:
        return TagMarker(kind=TagKind.END, anchor=anchor)
    return TagMarker(
        kind=TagKind.STANDALONE,
        tag_id=item.findtext(".//TagID", ""),
        alignment_anchor=alignment_anchor,
    )


def _declared_count(value: Any, source_file: Path) -> int:
    """Declared number of units; informational, so invalid values become 0."""
    try:
        count = int(value or 0)
    except (TypeError, ValueError):
        count = -1
    if count < 0:
        logger.warning(f"Invalid unit count {value!r} in {source_file}, using 0")
        return 0
    return count


class TMConverter:
    """Convert a translation memory store to a TMX document.

    Example:
        >>> converter = TMConverter(Settings())
        >>> converter.convert("main.sdltm", "out/tm")
        PosixPath('out/tm/Main TM.tmx')
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def convert(self, source_file: str | Path, output_dir: str | Path) -> Path:
        """Export a translation memory store to ``<name>.tmx``.

        Rows whose segments cannot be parsed are skipped.

        Args:
            source_file: Translation memory store (.sdltm)
            output_dir: Output folder, created if missing

        Returns:
            Path of the written TMX file

        Raises:
            MissingInputError: If the store does not exist or declares no memory
            StoreError: If the store cannot be read
            OSError: If the TMX file cannot be written
        """
        header, units = self.extract(source_file)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        # Keep the declared name, without any folder part
        tm_file = output_dir / f"{Path(header.name).name}.tmx"

        logger.info(
            f"Saving TMX file {tm_file}: {len(units)} TU ({header.unit_count} in sdltm)"
        )
        self.write(self.render(header, units), tm_file)
        return tm_file

    def extract(self, source_file: str | Path) -> tuple[TMHeader, list[TranslationUnit]]:
        """Read the header and every parsable translation unit of a store."""
        source_file = Path(source_file)

        with open_row_store(source_file) as store:
            header = self._read_header(store.rows(HEADER_TABLE, HEADER_COLUMNS), source_file)

            units = []
            skipped = 0
            for row in store.rows(UNIT_TABLE, UNIT_COLUMNS):
                try:
                    units.append(self.parse_unit(row))
                except MalformedRecordError as e:
                    logger.warning(f"Skipping translation unit: {e}")
                    skipped += 1

        if skipped:
            logger.warning(f"{skipped} translation unit(s) skipped in {source_file}")
        return header, units

    @staticmethod
    def _read_header(rows: Any, source_file: Path) -> TMHeader:
        headers = list(rows)
        if not headers:
            raise MissingInputError(f"No translation memory declared in {source_file}")

        first = headers[0]
        source_language = first["source_language"] or ""
        if len(headers) > 1:
            logger.warning(
                f"Multiple source languages in SDLTM, only the first one is used "
                f"({source_language})"
            )

        return TMHeader(
            name=first["name"] or source_file.stem,
            source_language=source_language,
            unit_count=_declared_count(first["tucount"], source_file),
        )

    def parse_unit(self, row: dict[str, Any]) -> TranslationUnit:
        """Parse one translation unit row.

        Raises:
            MalformedRecordError: If either segment cannot be parsed
        """
        unit_id = row.get("id")
        segments = []
        for column in ("source_segment", "target_segment"):
            xml = row.get(column)
            if not xml:
                raise MalformedRecordError(unit_id, f"empty {column}")
            try:
                segments.append(parse_segment(str(xml)))
            except ValueError as e:
                raise MalformedRecordError(unit_id, f"{column}: {e}") from e

        return TranslationUnit(source=segments[0], target=segments[1])

    def render(self, header: TMHeader, units: list[TranslationUnit]) -> StdET.ElementTree:
        """Build the TMX document."""
        tmx = StdET.Element("tmx", version=TMX_VERSION)
        StdET.SubElement(
            tmx,
            "header",
            {
                "creationtool": self.settings.creation_tool,
                "o-tmf": "SDLTM",
                "adminlang": "en-US",
                "datatype": "plaintext",
                "creationtoolversion": self.settings.creation_tool_version,
                "segtype": "sentence",
                "srclang": header.source_language,
            },
        )

        body = StdET.SubElement(tmx, "body")
        for unit in units:
            tu = StdET.SubElement(body, "tu")
            for segment in (unit.source, unit.target):
                tuv = StdET.SubElement(tu, "tuv", lang=segment.language)
                self._render_nodes(StdET.SubElement(tuv, "seg"), segment.nodes)

        return StdET.ElementTree(tmx)

    @staticmethod
    def _render_nodes(seg: StdET.Element, nodes: list[SegmentNode]) -> None:
        """Append segment nodes to a ``<seg>`` element as mixed content."""
        last: StdET.Element | None = None
        for node in nodes:
            if isinstance(node, TextNode):
                if last is None:
                    seg.text = (seg.text or "") + node.text
                else:
                    last.tail = (last.tail or "") + node.text
            elif node.kind is TagKind.START:
                last = StdET.SubElement(
                    seg, "bpt", type=node.tag_id, i=node.anchor, x=node.alignment_anchor
                )
            elif node.kind is TagKind.END:
                last = StdET.SubElement(seg, "ept", i=node.anchor)
            else:
                last = StdET.SubElement(seg, "ph", type=node.tag_id, x=node.alignment_anchor)

    @staticmethod
    def write(tree: StdET.ElementTree, tm_file: Path) -> None:
        """Write a TMX document; no partial file is left on failure.

        The document is not indented, indentation would alter segment text.
        """
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{tm_file.name}.", suffix=".tmp", dir=tm_file.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                tree.write(f, encoding="UTF-8", xml_declaration=True)
            os.replace(tmp_name, tm_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
