"""Unit tests for the termbase converter.

Tests concept parsing, column and pipe layouts, and every export format.
"""

import csv
import logging
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add tests directory to path to import conftest
tests_dir = Path(__file__).parent.parent
sys.path.insert(0, str(tests_dir))

from conftest import CONCEPT_ELECTRON, CONCEPT_PROTON, build_termbase_store  # noqa: E402

from sdlppx.converters.termbase import (  # noqa: E402
    TermbaseConverter,
    join_synonyms,
    normalize_language,
)
from sdlppx.core.errors import MalformedRecordError, MissingInputError  # noqa: E402
from sdlppx.core.models import (  # noqa: E402
    NON_TERM,
    OutputFormat,
    SynonymLayout,
    Term,
)
from sdlppx.utils.config import Settings  # noqa: E402

PROTON_ROW = [
    "2020-01-01T10:00:00",
    "jdoe",
    "2020-02-01T10:00:00",
    "asmith",
    "",
    "Physics",
    "Positive particle",
    "proton",
    "",
    "The proton is stable.",
    "",
    "",
    "",
    "",
    "antiproton",
    NON_TERM,
    "",
    "proton",
    "",
    "",
]


def make_converter(
    output_format: OutputFormat = OutputFormat.COMMA,
    synonym_layout: SynonymLayout = SynonymLayout.COLUMN,
) -> TermbaseConverter:
    return TermbaseConverter(
        Settings(_env_file=None, output_format=output_format, synonym_layout=synonym_layout)
    )


@pytest.mark.unit
class TestHelpers:
    """Test language normalization and synonym joining."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("French (Canada)", "French_Canada"),
            ("English", "English"),
            ("Chinese (Traditional, Taiwan)", "Chinese_Traditional,_Taiwan"),
        ],
    )
    def test_normalize_language(self, label: str, expected: str) -> None:
        assert normalize_language(label) == expected

    def test_join_puts_forbidden_terms_last(self) -> None:
        terms = [Term("proton"), Term("antiproton", term_info=NON_TERM)]
        assert join_synonyms(terms) == "proton|(NOT: antiproton)"

    def test_join_prepends_ordinary_terms(self) -> None:
        terms = [Term("antiproton", term_info=NON_TERM), Term("electron"), Term("negatron")]
        assert join_synonyms(terms) == "negatron|electron|(NOT: antiproton)"

    def test_join_empty(self) -> None:
        assert join_synonyms([]) == ""


@pytest.mark.unit
class TestParsing:
    """Test concept documents parsing."""

    def test_parse_concept(self) -> None:
        concept = make_converter().parse_concept(1, CONCEPT_PROTON)

        assert concept.creator == "jdoe"
        assert concept.creation_time == "2020-01-01T10:00:00"
        assert concept.modifier == "asmith"
        assert concept.modification_time == "2020-02-01T10:00:00"
        assert concept.metadata == {"Subject": "Physics"}

        english = concept.term_groups["English"]
        assert english.definition == "Positive particle"
        assert english.terms == [Term("proton", usage="The proton is stable.")]

        french = concept.term_groups["French_Canada"]
        assert french.terms == [Term("antiproton", term_info=NON_TERM), Term("proton")]

    def test_concept_without_modification(self) -> None:
        concept = make_converter().parse_concept(2, CONCEPT_ELECTRON)

        assert concept.modifier == ""
        assert concept.modification_time == ""

    def test_malformed_document(self) -> None:
        with pytest.raises(MalformedRecordError):
            make_converter().parse_concept(3, "<cG><lG>")

    def test_unexpected_root(self) -> None:
        with pytest.raises(MalformedRecordError, match="unexpected root"):
            make_converter().parse_concept(3, "<concept/>")

    @pytest.mark.parametrize("row", [{"conceptid": "abc", "text": "<cG/>"}, {"conceptid": 4}])
    def test_invalid_rows(self, row: dict[str, object]) -> None:
        with pytest.raises(MalformedRecordError):
            make_converter().parse_row(row)

    def test_extract_skips_malformed_rows(
        self, termbase_store: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            termbase = make_converter().extract(termbase_store)

        assert sorted(termbase.concepts) == [1, 2]
        assert termbase.sorted_languages == ["English", "French_Canada"]
        assert termbase.capacity("English") == 2
        assert termbase.capacity("French_Canada") == 2
        assert termbase.metadata == ["Status", "Subject"]
        assert "Record 3" in caplog.text

    def test_extract_missing_store(self, tmp_path: Path) -> None:
        with pytest.raises(MissingInputError):
            make_converter().extract(tmp_path / "missing.sdltb")


@pytest.mark.unit
class TestDelimitedExport:
    """Test comma, semicolon and tab exports."""

    def test_column_layout_header(self, termbase_store: Path) -> None:
        converter = make_converter()
        termbase = converter.extract(termbase_store)

        header = converter.header_row(termbase)

        assert header == [
            "Entry_Created",
            "Entry_Creator",
            "Entry_LastModified",
            "Entry_Modifier",
            "Status",
            "Subject",
            "English_Def",
            "English",
            "Term_Info",
            "Term_Example",
            "English",
            "Term_Info",
            "Term_Example",
            "French_Canada_Def",
            "French_Canada",
            "Term_Info",
            "Term_Example",
            "French_Canada",
            "Term_Info",
            "Term_Example",
        ]

    def test_rows_have_header_width(self, termbase_store: Path) -> None:
        converter = make_converter()
        termbase = converter.extract(termbase_store)

        rows = converter.rows(termbase)

        assert len(rows) == 3
        assert {len(row) for row in rows} == {4 + 2 + 7 + 7}

    def test_comma_export(self, termbase_store: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"

        output_file = make_converter().convert(termbase_store, out, "physics")

        assert output_file == out / "physics_glossary_English_French_Canada.csv"
        content = output_file.read_text(encoding="utf-8")
        lines = content.splitlines()
        assert lines[0].startswith('"Entry_Created","Entry_Creator"')
        assert not lines[0].endswith(",")

        rows = list(csv.reader(lines))
        # Concepts ordered by identifier, metadata keys in first-seen order
        assert rows[1] == PROTON_ROW
        assert rows[2][7:13] == ["electron", "", "", "negatron", "", ""]

    def test_semicolon_export(self, termbase_store: Path, tmp_path: Path) -> None:
        output_file = make_converter(OutputFormat.SEMICOLON).convert(
            termbase_store, tmp_path, "physics"
        )

        rows = list(csv.reader(output_file.read_text(encoding="utf-8").splitlines(), delimiter=";"))
        assert output_file.suffix == ".csv"
        assert len(rows) == 3
        assert rows[1][5] == "Physics"

    def test_tab_export_is_unquoted(self, termbase_store: Path, tmp_path: Path) -> None:
        output_file = make_converter(OutputFormat.TAB).convert(termbase_store, tmp_path, "p")

        lines = output_file.read_text(encoding="utf-8").splitlines()
        assert output_file.name == "p_glossary_English_French_Canada.txt"
        assert '"' not in lines[0]
        assert lines[0].split("\t")[0] == "Entry_Created"
        assert len(lines[1].split("\t")) == 20

    def test_pipe_layout(self, termbase_store: Path, tmp_path: Path) -> None:
        converter = make_converter(synonym_layout=SynonymLayout.PIPE)
        termbase = converter.extract(termbase_store)

        header, proton, electron = converter.rows(termbase)

        assert header[6:] == ["English_Def", "English", "French_Canada_Def", "French_Canada"]
        assert proton[6:] == [
            "Positive particle",
            "proton",
            "",
            "proton|(NOT: antiproton)",
        ]
        assert electron[6:] == ["", "negatron|electron", "", ""]


@pytest.mark.unit
class TestGlossaryExport:
    """Test OmegaT glossary exports."""

    def test_glossary_column_layout(self, termbase_store: Path, tmp_path: Path) -> None:
        output_file = make_converter(OutputFormat.GLOSSARY).convert(
            termbase_store, tmp_path, "physics"
        )

        assert output_file.name == "physics_glossary_English_French_Canada.txt"
        assert output_file.read_text(encoding="utf-8") == (
            "proton\t\tantiproton\tproton\n" "electron\tnegatron\t\t\n"
        )

    def test_glossary_pipe_layout(self, termbase_store: Path, tmp_path: Path) -> None:
        output_file = make_converter(OutputFormat.GLOSSARY, SynonymLayout.PIPE).convert(
            termbase_store, tmp_path, "physics"
        )

        assert output_file.read_text(encoding="utf-8") == (
            "proton\tproton|(NOT: antiproton)\n" "negatron|electron\t\n"
        )

    def test_language_with_definition_only(self, tmp_path: Path) -> None:
        document = (
            "<cG><lG><l type='German'/><dG><d type='Definition'>Teilchen</d></dG></lG>"
            "<lG><l type='English'/><tG><t>particle</t></tG></lG></cG>"
        )
        store = build_termbase_store(tmp_path / "tb.sdltb", [(1, document)])

        output_file = make_converter(OutputFormat.TAB).convert(store, tmp_path, "x")

        header, row = output_file.read_text(encoding="utf-8").splitlines()
        assert output_file.name == "x_glossary_English_German.txt"
        assert header.split("\t")[4:] == [
            "English_Def",
            "English",
            "Term_Info",
            "Term_Example",
            "German_Def",
        ]
        assert row.split("\t")[4:] == ["", "particle", "", "", "Teilchen"]

    def test_failed_write_leaves_no_file(self, termbase_store: Path, tmp_path: Path) -> None:
        converter = make_converter(OutputFormat.TAB)
        termbase = converter.extract(termbase_store)
        output_file = tmp_path / "out.txt"

        with patch.object(converter, "rows", return_value=[["ok"], [None]]):
            with pytest.raises(TypeError):
                converter.render(termbase, output_file)

        assert not output_file.exists()
        assert not any(p.suffix == ".tmp" for p in tmp_path.iterdir())
