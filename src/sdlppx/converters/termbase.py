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

"""Termbase (.sdltb) export to CSV, tab-delimited text or OmegaT glossary.

Each row of the ``mtConcepts`` table embeds one concept as XML:
    ```xml
    <cG>
      <c>1</c>
      <trG><tr type="origination">jdoe</tr><dt>2020-01-01T10:00:00</dt></trG>
      <trG><tr type="modification">jdoe</tr><dt>2020-02-01T10:00:00</dt></trG>
      <dG><d type="Subject">Physics</d></dG>
      <lG>
        <l type="French (Canada)" lang="FR-CA"/>
        <dG><d type="Definition">Particule subatomique</d></dG>
        <dG><d type="Forbidden term">antiproton</d></dG>
        <tG>
          <t>proton</t>
          <dG><d type="Usage example">Le proton est stable.</d></dG>
        </tG>
      </lG>
    </cG>
    ```
"""

from __future__ import annotations

import csv
import logging
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import defusedxml.ElementTree as ET  # noqa: N817

from sdlppx.core.errors import MalformedRecordError
from sdlppx.core.models import (
    NON_TERM,
    Concept,
    OutputFormat,
    SynonymLayout,
    Term,
    TermBase,
)
from sdlppx.core.store import open_row_store
from sdlppx.utils.config import Settings

logger = logging.getLogger(__name__)

CONCEPT_TABLE = "mtConcepts"
CONCEPT_COLUMNS = ("conceptid", "text")

ENTRY_COLUMNS = ["Entry_Created", "Entry_Creator", "Entry_LastModified", "Entry_Modifier"]
TERM_COLUMNS = ["Term_Info", "Term_Example"]

DESCRIPTION_DEFINITION = "Definition"
DESCRIPTION_FORBIDDEN = "Forbidden term"
DESCRIPTION_USAGE = "Usage example"

_PARENTHESES = re.compile(r"[()]")


def normalize_language(label: str) -> str:
    """Turn a termbase language label into a language code.

    Example:
        >>> normalize_language("French (Canada)")
        'French_Canada'
    """
    return _PARENTHESES.sub("", label.replace(" ", "_"))


def join_synonyms(terms: Iterable[Term]) -> str:
    """Join synonyms into one pipe-delimited cell.

    Ordinary terms are prepended and forbidden terms appended as
    ``(NOT: word)``, so ordinary terms come first.

    Example:
        >>> join_synonyms([Term("proton"), Term("antiproton", NON_TERM)])
        'proton|(NOT: antiproton)'
    """
    ordinary: list[str] = []
    forbidden: list[str] = []
    for term in terms:
        if term.is_forbidden:
            forbidden.append(f"(NOT: {term.word})")
        else:
            ordinary.insert(0, term.word)
    return "|".join(ordinary + forbidden)


def _text(element: Any) -> str:
    """Text content of an element and its descendants ("" for None)."""
    if element is None:
        return ""
    return "".join(element.itertext())


class TermbaseConverter:
    """Convert a termbase store into a delimited or glossary export.

    Export format and synonym layout come from the settings.

    Example:
        >>> settings = Settings(output_format=OutputFormat.COMMA)
        >>> converter = TermbaseConverter(settings)
        >>> converter.convert("physics.sdltb", "out/", "physics")
        PosixPath('out/physics_glossary_English_French_Canada.csv')
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    @property
    def output_format(self) -> OutputFormat:
        return self.settings.output_format

    @property
    def synonym_layout(self) -> SynonymLayout:
        return self.settings.synonym_layout

    def convert(self, source_file: str | Path, output_dir: str | Path, prefix: str) -> Path:
        """Export a termbase store to one file.

        Args:
            source_file: Termbase store (.sdltb)
            output_dir: Output folder, created if missing
            prefix: File name prefix

        Returns:
            Path of the written export

        Raises:
            MissingInputError: If the store does not exist
            StoreError: If the store cannot be read
            OSError: If the export cannot be written
        """
        logger.info(f"Converting {source_file} to {output_dir}")
        termbase = self.extract(source_file)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = self.output_path(termbase, output_dir, prefix)

        self.render(termbase, output_file)
        logger.info(
            f"Termbase converted: {len(termbase.concepts)} concepts, "
            f"{len(termbase.languages)} languages > {output_file}"
        )
        return output_file

    def output_path(self, termbase: TermBase, output_dir: Path, prefix: str) -> Path:
        languages = "_".join(termbase.sorted_languages)
        return output_dir / f"{prefix}_glossary_{languages}{self.output_format.extension}"

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def extract(self, source_file: str | Path) -> TermBase:
        """Read every concept of a termbase store.

        Rows whose embedded document cannot be parsed are skipped.
        """
        termbase = TermBase()
        skipped = 0

        with open_row_store(source_file) as store:
            for row in store.rows(CONCEPT_TABLE, CONCEPT_COLUMNS):
                try:
                    concept_id, concept = self.parse_row(row)
                except MalformedRecordError as e:
                    logger.warning(f"Skipping concept: {e}")
                    skipped += 1
                    continue

                if concept_id in termbase.concepts:
                    logger.warning(f"Duplicate concept {concept_id}, keeping the last one")
                termbase.add_concept(concept_id, concept)

        termbase.finalize()
        if skipped:
            logger.warning(f"{skipped} malformed concept(s) skipped in {source_file}")
        return termbase

    def parse_row(self, row: dict[str, Any]) -> tuple[int, Concept]:
        """Parse one ``mtConcepts`` row.

        Raises:
            MalformedRecordError: If the identifier or the document is invalid
        """
        raw_id = row.get("conceptid")
        try:
            concept_id = int(raw_id)  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(raw_id, f"invalid concept id {raw_id!r}") from e

        text = row.get("text")
        if not text:
            raise MalformedRecordError(concept_id, "empty concept document")

        return concept_id, self.parse_concept(concept_id, str(text))

    def parse_concept(self, concept_id: int, xml: str) -> Concept:
        """Parse the embedded XML document of a concept.

        Raises:
            MalformedRecordError: If the document is not a well-formed concept
        """
        try:
            root = ET.fromstring(xml)
        except (ET.ParseError, ValueError) as e:
            raise MalformedRecordError(concept_id, f"invalid XML: {e}") from e

        if root.tag != "cG":
            raise MalformedRecordError(concept_id, f"unexpected root element <{root.tag}>")

        concept = Concept()
        concept.creator, concept.creation_time = self._transaction(root, "origination")
        concept.modifier, concept.modification_time = self._transaction(root, "modification")

        # Concept-level metadata, keyed by field type
        for group in root.findall("dG"):
            field = next(iter(group), None)
            if field is None or not field.get("type"):
                continue
            concept.metadata[field.get("type")] = _text(field)

        for language_group in root.findall("lG"):
            self._parse_language_group(concept_id, concept, language_group)

        return concept

    @staticmethod
    def _transaction(root: Any, kind: str) -> tuple[str, str]:
        """User and date of an origination or modification transaction."""
        for group in root.findall("trG"):
            for transaction in group.findall("tr"):
                if transaction.get("type") == kind:
                    return _text(transaction), _text(group.find("dt"))
        return "", ""

    def _parse_language_group(self, concept_id: int, concept: Concept, element: Any) -> None:
        label = element.find("l")
        if label is None or not label.get("type"):
            logger.warning(f"Concept {concept_id}: language group without language, skipped")
            return

        language = normalize_language(label.get("type"))
        group = concept.term_group(language)

        for child in element:
            if child.tag == "dG":
                for description in child.findall("d"):
                    kind = description.get("type")
                    if kind == DESCRIPTION_FORBIDDEN:
                        group.terms.append(Term(_text(description), term_info=NON_TERM))
                    elif kind == DESCRIPTION_DEFINITION:
                        group.definition = _text(description)

            elif child.tag == "tG":
                term = Term(_text(child.find("t")))
                for descriptions in child.findall("dG"):
                    for description in descriptions.findall("d"):
                        if description.get("type") == DESCRIPTION_USAGE:
                            term.usage = _text(description)
                group.terms.append(term)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def header_row(self, termbase: TermBase) -> list[str]:
        """Header of delimited exports."""
        row = ENTRY_COLUMNS + termbase.metadata
        for language in termbase.sorted_languages:
            row.append(f"{language}_Def")
            if self.synonym_layout is SynonymLayout.COLUMN:
                for _ in range(termbase.capacity(language)):
                    row.extend([language, *TERM_COLUMNS])
            else:
                row.append(language)
        return row

    def concept_row(self, termbase: TermBase, concept: Concept) -> list[str]:
        """One data row of delimited exports, padded to the header width."""
        row = [
            concept.creation_time,
            concept.creator,
            concept.modification_time,
            concept.modifier,
        ]
        row.extend(concept.get_meta(key) for key in termbase.metadata)

        for language in termbase.sorted_languages:
            group = concept.term_groups.get(language)
            row.append(group.definition if group else "")
            terms = group.terms if group else []

            if self.synonym_layout is SynonymLayout.COLUMN:
                for term in terms:
                    row.extend([term.word, term.term_info, term.usage])
                padding = termbase.capacity(language) - len(terms)
                row.extend([""] * (3 * padding))
            else:
                row.append(join_synonyms(terms))
        return row

    def glossary_row(self, termbase: TermBase, concept: Concept) -> list[str]:
        """One OmegaT glossary row: term cells per language only."""
        row: list[str] = []
        for language in termbase.sorted_languages:
            group = concept.term_groups.get(language)
            terms = group.terms if group else []

            if self.synonym_layout is SynonymLayout.COLUMN:
                row.extend(term.word for term in terms)
                row.extend([""] * (termbase.capacity(language) - len(terms)))
            else:
                row.append(join_synonyms(terms))
        return row

    def rows(self, termbase: TermBase) -> list[list[str]]:
        """All rows of the export, header included when the format has one."""
        concepts = termbase.iter_concepts()
        if self.output_format is OutputFormat.GLOSSARY:
            return [self.glossary_row(termbase, concept) for concept in concepts]

        rows = [self.header_row(termbase)]
        rows.extend(self.concept_row(termbase, concept) for concept in concepts)
        return rows

    def render(self, termbase: TermBase, output_file: str | Path) -> None:
        """Write the export.

        The file is written next to its destination and moved into place
        once complete, so a failed export leaves no partial file.
        """
        output_file = Path(output_file)
        rows = self.rows(termbase)
        fmt = self.output_format

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_file.name}.", suffix=".tmp", dir=output_file.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                if fmt.quoted:
                    writer = csv.writer(
                        f, delimiter=fmt.delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n"
                    )
                    writer.writerows(rows)
                else:
                    for row in rows:
                        f.write(fmt.delimiter.join(row) + "\n")
            os.replace(tmp_name, output_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
