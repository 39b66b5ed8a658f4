"""Integration tests for the file-to-file merge workflow.

This module tests the complete workflow including:
- Loading a Covidence CSV/JSON export
- Merging keyword lines into a RIS export
- CLI exit status on fatal errors
"""

import csv
import json
from pathlib import Path

import pytest

from covidence_ris_merger.core.config import COVIDENCE_COLUMNS, MergeConfig
from covidence_ris_merger.core.exceptions import SchemaError, StructuralError, TitleLookupError
from covidence_ris_merger.merger import main, merge_files

RIS = """TY  - JOUR
AU  - Smith, J.
TI  - Study A
AB  - Randomised trial of something
ER  -

TY  - JOUR
TI  - Study B
PY  - 2021
ER  -
"""

MERGED = """TY  - JOUR
AU  - Smith, J.
TI  - Study A
AB  - Randomised trial of something
KW  - alpha
KW  - beta
ER  -
TY  - JOUR
TI  - Study B
PY  - 2021
KW  - Include
ER  -
"""


@pytest.fixture
def covidence_csv(tmp_path: Path) -> Path:
    path = tmp_path / "covidence.csv"
    rows = [
        {"Title": "Study A", "Authors": "Smith, J.", "Covidence #": "#1", "Tags": "alpha; beta"},
        {"Title": "Study B", "Covidence #": "#2", "Tags": "Include"},
    ]
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(COVIDENCE_COLUMNS))
        writer.writeheader()
        for row in rows:
            writer.writerow({col: row.get(col, "") for col in COVIDENCE_COLUMNS})
    return path


@pytest.fixture
def covidence_ris(tmp_path: Path) -> Path:
    path = tmp_path / "covidence.ris"
    path.write_text(RIS, encoding="utf-8")
    return path


@pytest.mark.integration
class TestMergeWorkflow:
    def test_merge_files_csv(self, tmp_path: Path, covidence_ris: Path, covidence_csv: Path) -> None:
        output = tmp_path / "merged.ris"

        stats = merge_files(str(covidence_ris), str(covidence_csv), str(output))

        assert output.read_text(encoding="utf-8") == MERGED
        assert stats.records == 2
        assert stats.keywords_added == 3

    def test_merge_files_json(self, tmp_path: Path, covidence_ris: Path) -> None:
        export = tmp_path / "covidence.json"
        export.write_text(
            json.dumps(
                [
                    {"Title": "Study A", "Tags": ["alpha", "beta"]},
                    {"Title": "Study B", "Tags": "Include"},
                ]
            ),
            encoding="utf-8",
        )
        output = tmp_path / "merged.ris"

        merge_files(str(covidence_ris), str(export), str(output), MergeConfig(strict_schema=False))

        assert output.read_text(encoding="utf-8") == MERGED

    def test_missing_title_raises(self, tmp_path: Path, covidence_csv: Path) -> None:
        ris = tmp_path / "extra.ris"
        ris.write_text(RIS + "TY  - JOUR\nTI  - Study C\nER  -\n", encoding="utf-8")

        with pytest.raises(TitleLookupError, match="Study C"):
            merge_files(str(ris), str(covidence_csv), str(tmp_path / "out.ris"))

    def test_structural_error(self, tmp_path: Path, covidence_csv: Path) -> None:
        ris = tmp_path / "bad.ris"
        ris.write_text("AU  - Smith\nTY  - JOUR\n", encoding="utf-8")

        with pytest.raises(StructuralError, match="File started with invalid tag AU"):
            merge_files(str(ris), str(covidence_csv), str(tmp_path / "out.ris"))

    def test_empty_tags_cell_writes_empty_keyword(self, tmp_path: Path, covidence_ris: Path) -> None:
        export = tmp_path / "tags.csv"
        export.write_text("Title,Tags\nStudy A,\nStudy B,x\n", encoding="utf-8")
        output = tmp_path / "merged.ris"

        merge_files(str(covidence_ris), str(export), str(output), MergeConfig(strict_schema=False))

        assert "AB  - Randomised trial of something\nKW  - \nER  -\n" in output.read_text(encoding="utf-8")

    def test_bare_carriage_return_does_not_split_line(self, tmp_path: Path, covidence_csv: Path) -> None:
        ris = tmp_path / "cr.ris"
        ris.write_bytes(b"TY  - JOUR\r\nTI  - Study A\r\nAB  - first\rsecond\r\nER  -\r\n")
        output = tmp_path / "merged.ris"

        merge_files(str(ris), str(covidence_csv), str(output))

        assert output.read_bytes() == (
            b"TY  - JOUR\nTI  - Study A\nAB  - first\rsecond\nKW  - alpha\nKW  - beta\nER  -\n"
        )

    def test_schema_error_before_ris_is_read(self, tmp_path: Path, covidence_ris: Path) -> None:
        export = tmp_path / "partial.csv"
        export.write_text("Title,Tags\nStudy A,alpha\n", encoding="utf-8")
        output = tmp_path / "out.ris"

        with pytest.raises(SchemaError):
            merge_files(str(covidence_ris), str(export), str(output))
        assert not output.exists()

    def test_both_inputs_from_stdin_rejected(self) -> None:
        with pytest.raises(ValueError, match="stdin"):
            merge_files("-", "-")


@pytest.mark.integration
class TestCLI:
    def test_main_writes_output(self, tmp_path: Path, covidence_ris: Path, covidence_csv: Path) -> None:
        output = tmp_path / "merged.ris"

        main([str(covidence_ris), str(covidence_csv), "-o", str(output)])

        assert output.read_text(encoding="utf-8") == MERGED

    def test_main_lenient_schema_and_keyword_tag(self, tmp_path: Path, covidence_ris: Path) -> None:
        export = tmp_path / "tags.csv"
        export.write_text("Title,Tags\nStudy A,alpha\nStudy B,beta\n", encoding="utf-8")
        output = tmp_path / "merged.ris"

        main(
            [
                str(covidence_ris),
                str(export),
                "--output",
                str(output),
                "--lenient-schema",
                "--keyword-tag",
                "DE",
            ]
        )

        text = output.read_text(encoding="utf-8")
        assert "DE  - alpha\nER  -" in text
        assert "DE  - beta\nER  -" in text

    def test_main_config_file(self, tmp_path: Path, covidence_ris: Path) -> None:
        export = tmp_path / "tags.json"
        export.write_text(json.dumps([{"Name": "Study A", "Tags": "x"}, {"Name": "Study B", "Tags": "y"}]))
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"title_column": "Name", "strict_schema": False}), encoding="utf-8")
        output = tmp_path / "merged.ris"

        main([str(covidence_ris), str(export), "-o", str(output), "--config", str(config)])

        assert "KW  - x\nER  -" in output.read_text(encoding="utf-8")

    def test_main_exits_non_zero_on_error(self, tmp_path: Path, covidence_csv: Path) -> None:
        ris = tmp_path / "open.ris"
        ris.write_text("TY  - JOUR\nAU  - Smith\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main([str(ris), str(covidence_csv), "-o", str(tmp_path / "out.ris")])
        assert exc_info.value.code == 1

    def test_main_missing_input_file(self, tmp_path: Path, covidence_ris: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([str(covidence_ris), str(tmp_path / "missing.csv"), "-o", str(tmp_path / "out.ris")])
        assert exc_info.value.code == 1

    def test_main_rejects_two_stdin_inputs(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
