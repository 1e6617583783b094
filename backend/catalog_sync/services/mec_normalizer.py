"""
MEC dataset normalizer.

Maps the heterogeneous header spellings used across dataset years onto a
canonical row and turns raw string fields into readable values.
"""
import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from ..schemas.mec import MecCsvRow, NormalizedInstitution, NormalizedCourse

ColumnMap = Dict[str, int]

BOM = "\ufeff"

# Portuguese connectors kept lowercase in names, wherever they appear
LOWERCASE_CONNECTORS = frozenset({"de", "da", "do", "das", "dos", "e", "em", "para", "com"})

# Candidate header names per canonical field, tried in order.
# 2022 names first, then the census (INEP) style names of older releases.
COLUMN_CANDIDATES: Mapping[str, tuple] = MappingProxyType({
    "CO_IES": ("CODIGO_IES", "CO_IES"),
    "NO_IES": ("NOME_IES", "NO_IES"),
    "SG_IES": ("SG_IES",),  # not present in the 2022 release
    "TP_ORGANIZACAO": ("ORGANIZACAO_ACADEMICA", "TP_ORGANIZACAO_ACADEMICA", "TP_ORGANIZACAO"),
    "TP_CATEGORIA": ("CATEGORIA_ADMINISTRATIVA", "TP_CATEGORIA_ADMINISTRATIVA", "TP_CATEGORIA"),
    "CO_MUNICIPIO_IES": ("CODIGO_MUNICIPIO", "CO_MUNICIPIO_IES", "CO_MUNICIPIO"),
    "NO_MUNICIPIO_IES": ("MUNICIPIO", "NO_MUNICIPIO_IES", "NO_MUNICIPIO"),
    "SG_UF_IES": ("UF", "SG_UF_IES", "SG_UF"),
    "CO_CURSO": ("CODIGO_CURSO", "CO_CURSO"),
    "NO_CURSO": ("NOME_CURSO", "NO_CURSO"),
    "TP_GRAU": ("GRAU", "TP_GRAU_ACADEMICO", "TP_GRAU"),
    "TP_MODALIDADE": ("MODALIDADE", "TP_MODALIDADE_ENSINO", "TP_MODALIDADE"),
    "NO_CINE_AREA_GERAL": ("AREA_OCDE_CINE", "AREA_OCDE", "NO_CINE_AREA_GERAL", "NO_AREA"),
    "QT_CARGA_HORARIA": ("CARGA_HORARIA", "QT_CARGA_HORARIA_TOTAL", "QT_CARGA_HORARIA"),
    "CO_SITUACAO": ("SITUACAO_CURSO", "CO_SITUACAO_CURSO", "CO_SITUACAO"),
})

# ========== Code -> label tables ==========
# Unknown codes pass through unchanged; empty codes map to None.

ORGANIZACAO_LABELS: Mapping[str, str] = MappingProxyType({
    "1": "Universidade",
    "2": "Centro Universitário",
    "3": "Faculdade",
    "4": "Instituto Federal",
    "5": "Centro Federal",
})

CATEGORIA_LABELS: Mapping[str, str] = MappingProxyType({
    "1": "Pública Federal",
    "2": "Pública Estadual",
    "3": "Pública Municipal",
    "4": "Privada com fins lucrativos",
    "5": "Privada sem fins lucrativos",
    "6": "Especial",
})

GRAU_LABELS: Mapping[str, str] = MappingProxyType({
    "1": "Bacharelado",
    "2": "Licenciatura",
    "3": "Tecnológico",
    "4": "Bacharelado e Licenciatura",
})

MODALIDADE_LABELS: Mapping[str, str] = MappingProxyType({
    "1": "Presencial",
    "2": "EaD",
})

SITUACAO_LABELS: Mapping[str, str] = MappingProxyType({
    "1": "Em atividade",
    "2": "Extinto",
    "3": "Em extinção",
})

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def lookup_label(table: Mapping[str, str], code: Optional[str]) -> Optional[str]:
    if not code:
        return None
    return table.get(code, code)


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a field ('3200', '3200.0', ' 12 ') or return None."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def normalize_text(text: Optional[str]) -> str:
    """Trim, collapse whitespace and title-case words, keeping connectors lowercase."""
    if not text:
        return ""
    words = []
    for word in text.split():
        lower = word.lower()
        if lower in LOWERCASE_CONNECTORS:
            words.append(lower)
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


# ========== Column resolution ==========

def build_column_map(header: List[str]) -> ColumnMap:
    column_map = {}
    for index, column in enumerate(header):
        normalized = column.lstrip(BOM).strip().upper()
        column_map[normalized] = index
    return column_map


def get_column_value(values: List[str], column_map: ColumnMap, *keys: str) -> str:
    """Value of the first candidate column that is present and non-empty, else ''."""
    for key in keys:
        index = column_map.get(key)
        if index is not None and index < len(values) and values[index]:
            return values[index]
    return ""


def map_row(values: List[str], column_map: ColumnMap) -> MecCsvRow:
    return MecCsvRow(**{
        field: get_column_value(values, column_map, *candidates)
        for field, candidates in COLUMN_CANDIDATES.items()
    })


# ========== Entity normalization ==========

def normalize_institution(row: MecCsvRow) -> Optional[NormalizedInstitution]:
    codigo_ies = parse_int(row.CO_IES)
    if codigo_ies is None or not row.NO_IES or not row.SG_UF_IES:
        return None

    return NormalizedInstitution(
        codigo_ies=codigo_ies,
        nome=normalize_text(row.NO_IES),
        sigla=normalize_text(row.SG_IES) or None,
        organizacao=lookup_label(ORGANIZACAO_LABELS, row.TP_ORGANIZACAO),
        categoria=lookup_label(CATEGORIA_LABELS, row.TP_CATEGORIA),
        uf=row.SG_UF_IES.upper(),
        municipio=normalize_text(row.NO_MUNICIPIO_IES) or None,
        codigo_municipio=parse_int(row.CO_MUNICIPIO_IES) or None,
    )


def normalize_course(row: MecCsvRow) -> Optional[NormalizedCourse]:
    codigo_curso = parse_int(row.CO_CURSO)
    codigo_ies = parse_int(row.CO_IES)
    if codigo_curso is None or codigo_ies is None or not row.NO_CURSO:
        return None

    return NormalizedCourse(
        codigo_curso=codigo_curso,
        codigo_ies=codigo_ies,
        nome=normalize_text(row.NO_CURSO),
        grau=lookup_label(GRAU_LABELS, row.TP_GRAU),
        modalidade=lookup_label(MODALIDADE_LABELS, row.TP_MODALIDADE),
        area_conhecimento=normalize_text(row.NO_CINE_AREA_GERAL) or None,
        carga_horaria=parse_int(row.QT_CARGA_HORARIA) or None,
        situacao=lookup_label(SITUACAO_LABELS, row.CO_SITUACAO),
    )
