"""Delimited-text parsing for the property attributes table."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ACCOUNT_COLUMN = "ACCOUNTNO"


@dataclass
class ParseReport:
    """Outcome of parsing one property table."""

    headers: list[str] = field(default_factory=list)
    records: dict[str, dict[str, str]] = field(default_factory=dict)
    skipped_rows: list[int] = field(default_factory=list)  # 1-based line numbers
    dropped_without_account: int = 0

    @property
    def record_count(self) -> int:
        return len(self.records)


def split_delimited_line(line: str, delimiter: str = ",") -> list[str]:
    """
    Split one line into trimmed fields.

    A double quote toggles the quoted state, so delimiters inside quotes are
    kept as part of the field. Quote characters themselves are dropped.

    Args:
        line: Raw text line
        delimiter: Field separator character

    Returns:
        List of field values
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_property_table(text: str, key_field: str = ACCOUNT_COLUMN, delimiter: str = ",") -> ParseReport:
    """
    Parse delimited text into records keyed by account identifier.

    Rows whose field count differs from the header are skipped and reported.
    Rows without an account identifier are dropped. A repeated account
    identifier overwrites the earlier row.

    Args:
        text: Raw delimited text, header row first
        key_field: Column holding the account identifier
        delimiter: Field separator character

    Returns:
        ParseReport with records and skip statistics
    """
    report = ParseReport()
    # A byte-order mark would otherwise stick to the first header name
    text = (text or "").removeprefix("\ufeff")
    lines = [line for line in text.split("\n") if line.strip()]

    if not lines:
        logger.error("No data lines found in property table")
        return report

    report.headers = split_delimited_line(lines[0], delimiter)
    expected = len(report.headers)
    logger.debug("Property table headers (%d): %s", expected, report.headers)

    for line_number, line in enumerate(lines[1:], start=2):
        values = split_delimited_line(line, delimiter)

        if len(values) != expected:
            logger.warning(
                "Line %d: expected %d columns, got %d; row skipped",
                line_number, expected, len(values),
            )
            report.skipped_rows.append(line_number)
            continue

        record = dict(zip(report.headers, values))

        account_id = record.get(key_field, "")
        if not account_id:
            report.dropped_without_account += 1
            continue

        report.records[account_id] = record

    logger.info(
        "Parsed %d property records (%d rows skipped, %d without account)",
        report.record_count, len(report.skipped_rows), report.dropped_without_account,
    )
    return report
