"""
Delimited-text decoding and tokenization.

Public datasets come either as UTF-8 or as legacy Latin-1, and use ',' or ';'
as delimiter depending on the dataset year. Fields may be double-quoted, in
which case delimiters inside the quotes are literal and "" is an escaped quote.
"""
import logging
from typing import List, Optional, Tuple

from ..exceptions import EmptyDatasetError

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"


def decode_bytes(raw: bytes) -> str:
    """Decode as UTF-8, falling back to Latin-1 when UTF-8 produces replacement characters."""
    text = raw.decode("utf-8", errors="replace")
    if REPLACEMENT_CHAR not in text:
        logger.info("[TOKENIZER] Source detected as UTF-8")
        return text

    # Latin-1 maps every byte, so this cannot fail
    logger.info("[TOKENIZER] Source detected as Latin-1, converted to UTF-8")
    return raw.decode("latin-1")


def split_lines(text: str) -> List[str]:
    """Normalize line endings and drop blank lines."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line for line in normalized.split("\n") if line.strip()]


def detect_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","


def parse_csv_line(line: str, delimiter: str = ",") -> List[str]:
    """
    Split one line into trimmed fields.

    Examples:
        a,"b, c",d    -> [a] [b, c] [d]
        "O""Brien",42 -> [O"Brien] [42]
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def has_unbalanced_quotes(line: str) -> bool:
    """True when a quoted field is left open at end of line (odd number of quote characters)."""
    return line.count('"') % 2 == 1


def require_data_rows(lines: List[str]) -> None:
    if len(lines) < 2:
        raise EmptyDatasetError("CSV file is empty or has no data rows")


def read_lines(text: str, delimiter: Optional[str] = None) -> Tuple[List[str], str]:
    """Non-blank lines of a dataset and its delimiter, detected from the header unless given."""
    lines = split_lines(text)
    require_data_rows(lines)
    return lines, delimiter or detect_delimiter(lines[0])


def tokenize(text: str, delimiter: Optional[str] = None) -> List[List[str]]:
    """Split the whole text into rows of fields. The first row is the header."""
    lines, delimiter = read_lines(text, delimiter)
    return [parse_csv_line(line, delimiter) for line in lines]
