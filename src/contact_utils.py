"""
Contact parsing and normalisation utilities.

Pure functions used by the bulk importer and manual entry:
- Delimited text parsing with quoted-field support
- Phone normalisation to E.164 (North American numbers)
- Permissive email syntax validation
"""

import re
from typing import Optional

# One "@", no whitespace, and a dotted domain with something either side of the dot
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Characters accepted in a hand-typed phone number
_PHONE_CHARS_RE = re.compile(r"^[\d\s\-\+\(\)]+$")

_NON_DIGITS_RE = re.compile(r"\D")


class MissingColumnsError(ValueError):
    """Raised when an import header lacks one or more required columns."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


def parse_delimited_line(line: str, separator: str = ",") -> list[str]:
    """
    Split a single line into fields.

    Double-quoted fields may contain the separator, and a doubled quote
    inside a quoted field ("") stands for a literal quote character.
    """
    values = []
    current = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]

        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    values.append("".join(current))
    return values


def parse_records(
    text: str,
    required_columns: list[str],
    separator: str = ",",
) -> list[dict]:
    """
    Parse delimited text into a list of row dicts keyed by header.

    The header is lowercased and trimmed. Data lines whose field count
    doesn't match the header are skipped, as are blank lines.

    Raises:
        MissingColumnsError: if the header lacks any required column
    """
    lines = [line.rstrip("\r") for line in (text or "").strip().split("\n")]
    if len(lines) < 2:
        return []

    headers = [h.strip().lower() for h in parse_delimited_line(lines[0], separator)]

    missing = [col for col in required_columns if col not in headers]
    if missing:
        raise MissingColumnsError(missing)

    rows = []
    for line in lines[1:]:
        if not line.strip():
            continue

        values = parse_delimited_line(line, separator)
        if len(values) != len(headers):
            continue

        rows.append({header: value.strip() for header, value in zip(headers, values)})

    return rows


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """
    Normalise a phone number to E.164 where possible.

    10 digits become +1XXXXXXXXXX, 11 digits starting with 1 become
    +1XXXXXXXXXX. Any other non-empty digit string is returned unchanged,
    and input with no digits at all gives None.
    """
    if not raw:
        return None

    digits = _NON_DIGITS_RE.sub("", raw)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if digits:
        return raw
    return None


def is_valid_email(email: Optional[str]) -> bool:
    """Syntactic email check only. No deliverability verification."""
    if not email:
        return False
    return bool(_EMAIL_RE.match(email.strip()))


def is_plausible_phone(phone: Optional[str]) -> bool:
    """Check a hand-typed phone number only uses digits and phone punctuation."""
    if not phone:
        return False
    return bool(_PHONE_CHARS_RE.match(phone))
