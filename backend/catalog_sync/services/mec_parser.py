"""
MEC CSV parser - turns decoded dataset text into deduplicated institutions,
courses and a list of per-row errors.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..exceptions import RowNormalizationError
from ..schemas.mec import NormalizedInstitution, NormalizedCourse
from ..schemas.sync import SyncError
from .csv_tokenizer import (
    read_lines,
    parse_csv_line,
    has_unbalanced_quotes,
)
from .mec_normalizer import build_column_map, map_row, normalize_institution, normalize_course

logger = logging.getLogger(__name__)

# Emit one warning per this many row errors instead of one per row
ERROR_LOG_INTERVAL = 1000


@dataclass
class ParseResult:
    institutions: Dict[int, NormalizedInstitution]
    courses: List[NormalizedCourse] = field(default_factory=list)
    errors: List[SyncError] = field(default_factory=list)
    total_rows: int = 0
    file_size: int = 0


def parse_dataset(
    content: str,
    file_size: int,
    institutions: Optional[Dict[int, NormalizedInstitution]] = None,
) -> ParseResult:
    """
    Parse a full dataset.

    Args:
        content: Decoded text, first line is the header
        file_size: Size of the raw payload in bytes, reported back in the result
        institutions: Map to deduplicate institutions into. Entries already
            present win over later rows. A new map is created when omitted.

    Returns:
        ParseResult owning the (possibly caller supplied) institutions map

    Raises:
        EmptyDatasetError: fewer than a header and one data row
    """
    lines, delimiter = read_lines(content)
    header = parse_csv_line(lines[0], delimiter)
    column_map = build_column_map(header)
    logger.info(f"[PARSER] CSV has {len(lines) - 1} data rows, {len(header)} columns, delimiter '{delimiter}'")

    result = ParseResult(
        institutions=institutions if institutions is not None else {},
        total_rows=len(lines) - 1,
        file_size=file_size,
    )

    for index in range(1, len(lines)):
        line = lines[index]
        try:
            if has_unbalanced_quotes(line):
                raise RowNormalizationError("Unterminated quoted field")
            row = map_row(parse_csv_line(line, delimiter), column_map)

            institution = normalize_institution(row)
            if institution and institution.codigo_ies not in result.institutions:
                result.institutions[institution.codigo_ies] = institution

            course = normalize_course(row)
            if course:
                result.courses.append(course)
        except Exception as e:
            result.errors.append(SyncError(row=index + 1, message=str(e) or type(e).__name__))
            if len(result.errors) % ERROR_LOG_INTERVAL == 0:
                logger.warning(f"[PARSER] {len(result.errors)} parse errors so far...")

    logger.info(
        f"[PARSER] Parsed: {len(result.institutions)} institutions, "
        f"{len(result.courses)} courses, {len(result.errors)} errors"
    )
    return result
