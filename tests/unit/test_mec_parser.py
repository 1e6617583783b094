"""Unit tests for dataset parsing, deduplication and per-row error collection."""
import pytest

from catalog_sync.exceptions import EmptyDatasetError
from catalog_sync.schemas.mec import NormalizedInstitution
from catalog_sync.services.mec_parser import parse_dataset
from tests.support import MEC_HEADER, MEC_ROWS, build_mec_csv


def _parse(rows):
    content = build_mec_csv(rows).decode("utf-8")
    return parse_dataset(content, len(content))


def test_parse_dataset_dedups_institutions_and_keeps_all_courses() -> None:
    """Two courses of the same institution yield one institution and two courses."""
    result = _parse(MEC_ROWS)

    assert sorted(result.institutions) == [1, 2, 3]
    assert [c.codigo_curso for c in result.courses] == [101, 102, 201, 301]
    assert result.total_rows == 4
    assert result.errors == []


def test_parse_dataset_quoted_name_with_delimiter() -> None:
    result = _parse(MEC_ROWS)

    assert result.institutions[2].nome == "Universidade de Sao Paulo, Usp"
    assert result.institutions[2].uf == "SP"


def test_parse_dataset_first_institution_row_wins() -> None:
    """Later rows for an already seen institution do not overwrite it."""
    rows = [
        "5,PRIMEIRO NOME,1,1,501,CURSO A,1,AREA,1,1,1,CIDADE,SP,100",
        "5,SEGUNDO NOME,1,1,502,CURSO B,1,AREA,1,1,1,CIDADE,SP,100",
    ]

    result = _parse(rows)

    assert result.institutions[5].nome == "Primeiro Nome"


def test_parse_dataset_respects_caller_supplied_map() -> None:
    """Entries already in the supplied map win over the dataset."""
    existing = NormalizedInstitution(codigo_ies=1, nome="Já Conhecida", uf="MT")
    content = build_mec_csv().decode("utf-8")

    result = parse_dataset(content, len(content), institutions={1: existing})

    assert result.institutions[1].nome == "Já Conhecida"
    assert len(result.institutions) == 3


def test_parse_dataset_skips_invalid_rows_silently() -> None:
    """Rows failing the entity invariants are dropped without an error."""
    rows = [
        ",SEM CODIGO,1,1,601,CURSO,1,AREA,1,1,1,CIDADE,SP,100",
        "7,,1,1,,,1,AREA,1,1,1,CIDADE,SP,100",
    ]

    result = _parse(rows)

    assert result.institutions == {}
    assert result.courses == []
    assert result.errors == []


def test_parse_dataset_collects_row_errors_with_line_numbers() -> None:
    """An unterminated quote is reported with its 1-based line number; other rows still parse."""
    rows = [MEC_ROWS[0], '9,"BROKEN NAME,1,1,901,CURSO,1,AREA,1,1,1,CIDADE,SP,100', MEC_ROWS[3]]

    result = _parse(rows)

    assert len(result.errors) == 1
    assert result.errors[0].row == 3
    assert "quoted" in result.errors[0].message.lower()
    assert sorted(result.institutions) == [1, 3]


def test_parse_dataset_semicolon_source() -> None:
    header = MEC_HEADER.replace(",", ";")
    rows = [row.replace(",", ";") for row in (MEC_ROWS[0], MEC_ROWS[3])]
    content = build_mec_csv(rows, header=header).decode("utf-8")

    result = parse_dataset(content, len(content))

    assert sorted(result.institutions) == [1, 3]
    assert len(result.courses) == 2


def test_parse_dataset_rejects_header_only() -> None:
    with pytest.raises(EmptyDatasetError):
        parse_dataset(MEC_HEADER + "\n", 10)


def test_parse_dataset_minimal_semicolon_source() -> None:
    """A three-column release still yields a normalized institution."""
    content = "CODIGO_IES;NOME_IES;UF\n55;Universidade X;sp\n"

    result = parse_dataset(content, len(content))

    institution = result.institutions[55]
    assert institution.codigo_ies == 55
    assert institution.nome == "Universidade X"
    assert institution.uf == "SP"
    assert result.courses == []
    assert result.errors == []


def test_parse_dataset_drops_non_numeric_institution_code() -> None:
    """A code that is not an integer drops the row without reporting an error."""
    rows = ["abc,NOME QUALQUER,1,1,701,CURSO,1,AREA,1,1,1,CIDADE,SP,100", MEC_ROWS[3]]

    result = _parse(rows)

    assert sorted(result.institutions) == [3]
    assert [c.codigo_curso for c in result.courses] == [301]
    assert result.errors == []
