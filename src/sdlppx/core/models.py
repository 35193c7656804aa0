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

"""Core data models for package, termbase and translation memory conversion.

This module defines the structures shared by the converters:
- Package types and export options
- The termbase document model (concepts, term groups, terms)
- Translation memory headers, segments and units
- Package transformation outcomes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Term info flag marking a forbidden term (non-term) in a term group
NON_TERM = "NonTerm"


class PackageType(str, Enum):
    """Value of the ``PackageType`` attribute of a project descriptor."""

    PROJECT_PACKAGE = "ProjectPackage"
    RETURN_PACKAGE = "ReturnPackage"


class SynonymLayout(str, Enum):
    """How synonyms of one language are laid out in termbase exports.

    - column: one (term, term info, usage) column set per synonym slot
    - pipe: one column per language, synonyms joined with ``|``
    """

    COLUMN = "column"
    PIPE = "pipe"


class OutputFormat(str, Enum):
    """Termbase export format."""

    COMMA = "comma"
    SEMICOLON = "semicolon"
    TAB = "tab"
    GLOSSARY = "glossary"

    @property
    def delimiter(self) -> str:
        """Field separator written between cells."""
        return {"comma": ",", "semicolon": ";"}.get(self.value, "\t")

    @property
    def extension(self) -> str:
        """File extension of the export."""
        return ".csv" if self.quoted else ".txt"

    @property
    def quoted(self) -> bool:
        """Whether every field is quoted (comma and semicolon variants)."""
        return self in (OutputFormat.COMMA, OutputFormat.SEMICOLON)


# ============================================================================
# Termbase document model
# ============================================================================


@dataclass
class Term:
    """Single term of a term group.

    Attributes:
        word: The term itself
        term_info: Flag string, ``NonTerm`` marks a forbidden term
        usage: Usage example
    """

    word: str
    term_info: str = ""
    usage: str = ""

    @property
    def is_forbidden(self) -> bool:
        return self.term_info == NON_TERM


@dataclass
class TermGroup:
    """Definition and synonyms of one concept in one language."""

    definition: str = ""
    terms: list[Term] = field(default_factory=list)


@dataclass
class Concept:
    """Language-independent termbase entry.

    Attributes:
        creator: User who created the entry
        creation_time: Creation timestamp, as stored in the termbase
        modifier: User who last modified the entry
        modification_time: Modification timestamp, as stored in the termbase
        metadata: Concept-level metadata (key is the field type)
        term_groups: Term group per language code
    """

    creator: str = ""
    creation_time: str = ""
    modifier: str = ""
    modification_time: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    term_groups: dict[str, TermGroup] = field(default_factory=dict)

    def term_group(self, language: str) -> TermGroup:
        """Get the term group of a language, creating it on first use."""
        return self.term_groups.setdefault(language, TermGroup())

    def get_meta(self, key: str) -> str:
        return self.metadata.get(key, "")


@dataclass
class TermBase:
    """Termbase built from a termbase store.

    Built in two phases: concepts are populated row by row, then
    ``finalize()`` computes the synonym capacity of every language, which is
    the maximum number of terms one concept holds for that language.

    Attributes:
        concepts: Concepts by concept identifier
        languages: Synonym capacity by language code
        metadata: Concept-level metadata keys in first-seen order
    """

    concepts: dict[int, Concept] = field(default_factory=dict)
    languages: dict[str, int] = field(default_factory=dict)
    metadata: list[str] = field(default_factory=list)

    def add_concept(self, concept_id: int, concept: Concept) -> None:
        self.concepts[concept_id] = concept
        for key in concept.metadata:
            self.register_metadata(key)

    def register_metadata(self, key: str) -> None:
        """Register a metadata key if it has not been seen yet."""
        if key not in self.metadata:
            self.metadata.append(key)

    def capacity(self, language: str) -> int:
        return self.languages.get(language, 0)

    def finalize(self) -> None:
        """Back-fill the per-language synonym capacities."""
        for concept in self.concepts.values():
            for language, group in concept.term_groups.items():
                if len(group.terms) > self.languages.get(language, -1):
                    self.languages[language] = len(group.terms)

    @property
    def sorted_languages(self) -> list[str]:
        return sorted(self.languages)

    def iter_concepts(self) -> list[Concept]:
        """Concepts ordered by concept identifier."""
        return [self.concepts[key] for key in sorted(self.concepts)]


# ============================================================================
# Translation memory model
# ============================================================================


class TMHeader(BaseModel):
    """Header row of a translation memory store."""

    name: str = Field(..., description="Translation memory name", min_length=1)
    source_language: str = Field(..., description="Source language code")
    unit_count: int = Field(default=0, description="Declared unit count (informational)", ge=0)


class TagKind(str, Enum):
    """Kind of inline tag marker."""

    START = "Start"
    END = "End"
    STANDALONE = "Standalone"


class TextNode(BaseModel):
    """Run of plain text inside a segment."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Literal text")


class TagMarker(BaseModel):
    """Inline tag placeholder inside a segment.

    Anchor values are copied through unchanged.
    """

    model_config = ConfigDict(frozen=True)

    kind: TagKind = Field(..., description="Start, End or Standalone")
    tag_id: str = Field(default="", description="Declared tag identifier")
    anchor: str = Field(default="", description="Tag anchor position")
    alignment_anchor: str = Field(default="", description="Alignment anchor position")


SegmentNode = TextNode | TagMarker


class Segment(BaseModel):
    """Segment in one language, as an ordered sequence of nodes."""

    language: str = Field(..., description="Culture name, e.g. en-US")
    nodes: list[SegmentNode] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Plain text of the segment, tags dropped."""
        return "".join(node.text for node in self.nodes if isinstance(node, TextNode))


class TranslationUnit(BaseModel):
    """Aligned source/target segment pair."""

    source: Segment
    target: Segment


# ============================================================================
# Package transformation
# ============================================================================


class TransformOutcome(BaseModel):
    """Result of a package transformation.

    ``renamed`` is True only when the descriptor was flipped to
    ``ReturnPackage`` and the archive got the return package extension.
    """

    renamed: bool = Field(default=False, description="Descriptor updated and archive renamed")
    new_path: Path = Field(..., description="Path of the archive after the run")
    target_language: str | None = Field(default=None, description="Target language code")
    replaced: list[str] = Field(default_factory=list, description="Archive entries replaced")
    missing: list[str] = Field(
        default_factory=list, description="Archive entries without a translated file"
    )
