"""Configuration-property metadata whitelist reconciliation.

A source project may declare its own metadata filters in
``META-INF/dataflow-configuration-metadata-whitelist.properties``.  The
functions here fold those filters into the caller-supplied ones.  Reading the
file is best-effort: every outcome is reported through a
:class:`WhitelistResult` instead of an exception, so the caller decides how
loudly to log it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


WHITELIST_DIR = "META-INF"
WHITELIST_FILE_NAME = "dataflow-configuration-metadata-whitelist.properties"
CONFIGURATION_PROPERTIES_CLASSES = "configuration-properties.classes"
CONFIGURATION_PROPERTIES_NAMES = "configuration-properties.names"


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


class WhitelistStatus(str, Enum):
    NO_RESOURCES_DIR = "no_resources_dir"
    NO_FILE = "no_file"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class WhitelistResult:
    """Outcome of reading the project-local whitelist file."""

    status: WhitelistStatus
    path: Path | None = None
    classes: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    error: str = ""

    @property
    def loaded(self) -> bool:
        return self.status is WhitelistStatus.LOADED


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def whitelist_path(resources_dir: str | Path) -> Path:
    """Location of the whitelist file inside a resources directory."""
    return Path(resources_dir) / WHITELIST_DIR / WHITELIST_FILE_NAME


def read_whitelist(resources_dir: str | Path | None) -> WhitelistResult:
    """Read the whitelist file under *resources_dir*.

    Never raises.  A missing directory or file is reported through the
    returned status; I/O and decoding failures become ``ERROR``.
    """
    if resources_dir is None or not Path(resources_dir).is_dir():
        return WhitelistResult(WhitelistStatus.NO_RESOURCES_DIR)

    path = whitelist_path(resources_dir)
    if not path.is_file():
        return WhitelistResult(WhitelistStatus.NO_FILE, path=path)

    try:
        # .properties files are ISO-8859-1 unless escaped with \uXXXX
        text = path.read_text(encoding="latin-1")
        properties = parse_properties(text)
    except (OSError, UnicodeError, ValueError) as exc:
        return WhitelistResult(WhitelistStatus.ERROR, path=path, error=str(exc))

    classes: list[str] = []
    names: list[str] = []
    add_to_filters(properties.get(CONFIGURATION_PROPERTIES_CLASSES), classes)
    add_to_filters(properties.get(CONFIGURATION_PROPERTIES_NAMES), names)
    return WhitelistResult(
        WhitelistStatus.LOADED, path=path, classes=classes, names=names
    )


def populate_filters(
    source_type_filters: list[str],
    name_filters: list[str],
    resources_dir: str | Path | None,
) -> WhitelistResult:
    """Merge whitelist-file filters into the given lists, in place.

    Existing entries keep their position; new entries are appended in the
    order they appear in the file.  The lists are untouched unless the file
    was loaded.
    """
    result = read_whitelist(resources_dir)
    if result.loaded:
        for token in result.classes:
            if token not in source_type_filters:
                source_type_filters.append(token)
        for token in result.names:
            if token not in name_filters:
                name_filters.append(token)
    return result


def add_to_filters(csv_filters: str | None, filters: list[str]) -> None:
    """Append every non-blank, not-yet-present token of *csv_filters*."""
    if not csv_filters or not csv_filters.strip():
        return
    for token in csv_filters.strip().split(","):
        token = token.strip()
        if token and token not in filters:
            filters.append(token)


# ---------------------------------------------------------------------------
# .properties parsing
# ---------------------------------------------------------------------------

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_UNICODE_ESCAPE = re.compile(r"u([0-9a-fA-F]{4})")
# .properties lines end only at \n, \r or \r\n
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def parse_properties(text: str) -> dict[str, str]:
    """Parse Java ``.properties`` text into a dict.

    Supports ``#``/``!`` comments, ``=``/``:``/whitespace separators and
    backslash line continuations.  Lines that cannot be split still produce a
    key with an empty value, so one bad line never discards the rest.
    Later keys override earlier ones.
    """
    result: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_key_value(line)
        result[_unescape(key)] = _unescape(value)
    return result


def _logical_lines(text: str) -> list[str]:
    """Join continuation lines and drop blanks and comments."""
    lines: list[str] = []
    pending = ""
    continuing = False
    for raw in _LINE_BREAK.split(text):
        stripped = raw.lstrip(" \t\f")
        if not continuing and (not stripped or stripped[0] in "#!"):
            continue
        trailing = len(stripped) - len(stripped.rstrip("\\"))
        if trailing % 2 == 1:
            pending += stripped[:-1]
            continuing = True
            continue
        lines.append(pending + stripped)
        pending = ""
        continuing = False
    if pending:
        lines.append(pending)
    return lines


def _split_key_value(line: str) -> tuple[str, str]:
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=: \t\f":
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def _unescape(value: str) -> str:
    if "\\" not in value:
        return value
    out: list[str] = []
    i = 0
    n = len(value)
    while i < n:
        ch = value[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue
        nxt = value[i + 1]
        if nxt == "u":
            match = _UNICODE_ESCAPE.match(value, i + 1)
            if match:
                out.append(chr(int(match.group(1), 16)))
                i = match.end()
                continue
            # malformed \u: keep it literally
            out.append("\\u")
            i += 2
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    text = "".join(out)
    if any("\ud800" <= ch <= "\udfff" for ch in text):
        # join \uD83D\uDE00 style pairs into one character
        text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return text


_ESCAPE_CODES = {v: k for k, v in _ESCAPES.items()}


def escape_property_value(value: str) -> str:
    """Escape *value* for the right-hand side of a ``.properties`` line.

    Non-ASCII characters become ``\\uXXXX`` so the file stays readable as
    ISO-8859-1; :func:`parse_properties` returns the original string.
    """
    out: list[str] = []
    for i, ch in enumerate(value):
        code = ord(ch)
        if ch == "\\":
            out.append("\\\\")
        elif ch in _ESCAPE_CODES:
            out.append("\\" + _ESCAPE_CODES[ch])
        elif ch == " " and i == 0:
            out.append("\\ ")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif code < 0x20 or code > 0x7E:
            out.extend(_unicode_escapes(ch))
        else:
            out.append(ch)
    return "".join(out)


def _unicode_escapes(ch: str) -> list[str]:
    units = ch.encode("utf-16-be")
    return [
        f"\\u{int.from_bytes(units[j:j + 2], 'big'):04X}"
        for j in range(0, len(units), 2)
    ]
