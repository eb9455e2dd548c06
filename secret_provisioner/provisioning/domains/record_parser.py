"""Parser for the two-column secrets CSV file."""
import csv
import logging
from pathlib import Path
from typing import List, Optional, TextIO, Union

from .errors import FormatError
from .models import SecretRecord

logger = logging.getLogger(__name__)

HEADER = ("name", "value")


class _RecordTracker:
    """
    Feeds lines to csv.reader and keeps the raw text of the record being read.

    csv.reader pulls exactly the lines one record needs, so after each row the
    buffer holds that row's raw text. CRLF line endings are turned into LF,
    including inside quoted values.
    """

    def __init__(self, source: TextIO):
        self._source = source
        self._raw = []

    def __iter__(self):
        for line in self._source:
            if line.endswith("\r\n"):
                line = line[:-2] + "\n"
            self._raw.append(line)
            yield line

    def take(self) -> str:
        raw = "".join(self._raw)
        self._raw = []
        return raw


def _has_bare_quote(raw: str) -> bool:
    """True if a quote appears inside a field that did not start with one."""
    quoted = False
    field_start = True
    i = 0
    while i < len(raw):
        ch = raw[i]
        if quoted:
            if ch == '"':
                if raw[i + 1:i + 2] == '"':
                    i += 1
                else:
                    quoted = False
        elif ch == '"':
            if not field_start:
                return True
            quoted = True
        field_start = ch == ',' and not quoted
        i += 1
    return False


def _next_row(reader, tracker: _RecordTracker) -> Optional[List[str]]:
    for row in reader:
        raw = tracker.take()
        if not row:
            continue
        if _has_bare_quote(raw):
            raise FormatError(f'Bare " in non-quoted field on line {reader.line_num}')
        return row
    return None


def parse_secrets(source: TextIO) -> List[SecretRecord]:
    """
    Parse secrets from an open CSV text stream.

    The first row must be the header ``name,value`` (case-insensitive).
    Every following row must have exactly two fields. Blank lines are skipped.
    Names and values are taken verbatim apart from CRLF line endings inside
    quoted values, which become LF; values are encoded as UTF-8.

    Args:
        source: Text stream opened with newline=""

    Returns:
        Records in file order (possibly empty)

    Raises:
        FormatError: On a bad header, a row with the wrong field count, or
            malformed CSV quoting (including a quote inside an unquoted
            field). No partial result is returned.
    """
    tracker = _RecordTracker(source)
    reader = csv.reader(tracker, strict=True)

    try:
        header = _next_row(reader, tracker)
        if header is None:
            raise FormatError("Unable to read CSV header: file is empty")
        if len(header) != len(HEADER):
            raise FormatError(
                f"CSV header must have {len(HEADER)} fields, got {len(header)} on line {reader.line_num}"
            )
        if tuple(cell.lower() for cell in header) != HEADER:
            raise FormatError(f"CSV header must be 'name,value', got '{header[0]},{header[1]}'")

        records = []
        while True:
            row = _next_row(reader, tracker)
            if row is None:
                break
            if len(row) != 2:
                raise FormatError(
                    f"Wrong number of fields on line {reader.line_num}: expected 2, got {len(row)}"
                )
            records.append(SecretRecord(name=row[0], value=row[1].encode("utf-8")))
    except csv.Error as e:
        raise FormatError(f"Unable to read CSV record on line {reader.line_num}: {e}") from e

    return records


def read_secrets_file(path: Union[str, Path]) -> List[SecretRecord]:
    """
    Read and parse a secrets CSV file.

    The file is closed on every exit path, including parse failures.

    Raises:
        FormatError: If the file cannot be opened, is not valid UTF-8, or is malformed
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            records = parse_secrets(f)
    except OSError as e:
        raise FormatError(f"Unable to open file '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise FormatError(f"File '{path}' is not valid UTF-8: {e}") from e

    logger.debug(f"Parsed {len(records)} secret(s) from {path}")
    return records
