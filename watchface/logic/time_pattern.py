"""
TimePattern – compiles and applies clock patterns such as "h:mm:ss a".

Pattern letters (repeat a letter to widen the field):

    H  hour of day (0-23)          k  clock hour of day (1-24)
    K  hour of half-day (0-11)     h  clock hour of half-day (1-12)
    m  minute                      s  second
    S  fraction of second          a  AM/PM marker (localized)
    y  year ("yy" = two digits)    M  month ("MMM" short text, "MMMM" full)
    d  day of month                D  day of year
    E  day of week ("EEEE" full)   z  zone abbreviation ("zzzz" zone id)
    Z  offset "+HHMM" ("ZZ" = "+HH:MM", "ZZZ" = zone id)

Text inside single quotes is literal, '' is a quote. Punctuation, digits and
whitespace are literal. Any other letter is rejected.

Compiled patterns are immutable and can be shared between controllers.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Dict, List, Tuple, Union

from ..exceptions.errors import FormatParseError

_SUPPORTED_LETTERS = frozenset("HkKhmsSayMdDEzZ")

_HALFDAY_TEXT: Dict[str, Tuple[str, str]] = {
    "en": ("AM", "PM"),
    "de": ("AM", "PM"),
    "es": ("a. m.", "p. m."),
    "ja": ("午前", "午後"),
    "ko": ("오전", "오후"),
    "zh": ("上午", "下午"),
}

_MONTHS: Dict[str, Tuple[str, ...]] = {
    "en": ("January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"),
    "de": ("Januar", "Februar", "März", "April", "Mai", "Juni", "Juli",
           "August", "September", "Oktober", "November", "Dezember"),
}

_WEEKDAYS: Dict[str, Tuple[str, ...]] = {
    "en": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
    "de": ("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"),
}

_FALLBACK_LANGUAGE = "en"

# A compiled token is either literal text or (letter, count).
Token = Union[str, Tuple[str, int]]


def language_of(locale: str) -> str:
    """'de_DE' / 'de-DE' / 'DE' -> 'de'."""
    return locale.replace("-", "_").split("_", 1)[0].lower() or _FALLBACK_LANGUAGE


def tokenize(pattern: str) -> List[Token]:
    """Splits *pattern* into literal and field tokens.

    :raises FormatParseError: empty pattern, unknown letter, unterminated quote
    """
    if not pattern:
        raise FormatParseError(pattern, "pattern is empty")

    tokens: List[Token] = []
    literal: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            start = i
            i += 1
            while True:
                if i >= n:
                    raise FormatParseError(pattern, "unterminated quote", start)
                if pattern[i] == "'":
                    if i + 1 < n and pattern[i + 1] == "'":
                        literal.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
            continue
        if ("a" <= ch <= "z") or ("A" <= ch <= "Z"):
            if ch not in _SUPPORTED_LETTERS:
                raise FormatParseError(pattern, f"illegal pattern component {ch!r}", i)
            if literal:
                tokens.append("".join(literal))
                literal = []
            count = 1
            while i + count < n and pattern[i + count] == ch:
                count += 1
            tokens.append((ch, count))
            i += count
            continue
        literal.append(ch)
        i += 1

    if literal:
        tokens.append("".join(literal))
    return tokens


# --- field renderers ---------------------------------------------------------

def _pad(value: int, count: int) -> str:
    return str(value).zfill(count)


def _hour_of_halfday(dt: datetime) -> int:
    return dt.hour % 12


def _offset_text(dt: datetime, colon: bool) -> str:
    offset = dt.utcoffset() or timedelta(0)
    total = int(offset.total_seconds()) // 60
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total), 60)
    return f"{sign}{hours:02d}:{minutes:02d}" if colon else f"{sign}{hours:02d}{minutes:02d}"


def _zone_id(dt: datetime) -> str:
    key = getattr(dt.tzinfo, "key", None)
    return key or (dt.tzname() or "")


class TimePattern:
    """An immutable, compiled time pattern bound to a locale."""

    __slots__ = ("_pattern", "_locale", "_tokens", "_renderers")

    def __init__(self, pattern: str, locale: str = "en_US") -> None:
        self._pattern = pattern
        self._locale = locale
        self._tokens = tuple(tokenize(pattern))
        self._renderers: Tuple[Callable[[datetime], str], ...] = tuple(
            self._renderer(token) for token in self._tokens
        )

    # --- Public API ---------------------------------------------------------

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def locale(self) -> str:
        return self._locale

    def format(self, dt: datetime) -> str:
        """Renders *dt*. Zone fields render empty/+0000 for naive datetimes."""
        return "".join(render(dt) for render in self._renderers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimePattern):
            return NotImplemented
        return (self._pattern, self._locale) == (other._pattern, other._locale)

    def __hash__(self) -> int:
        return hash((self._pattern, self._locale))

    def __repr__(self) -> str:
        return f"TimePattern({self._pattern!r}, locale={self._locale!r})"

    # --- Internal helpers ---------------------------------------------------

    def _renderer(self, token: Token) -> Callable[[datetime], str]:
        if isinstance(token, str):
            return lambda _dt, text=token: text

        letter, count = token
        lang = language_of(self._locale)

        if letter == "H":
            return lambda dt: _pad(dt.hour, count)
        if letter == "k":
            return lambda dt: _pad(dt.hour or 24, count)
        if letter == "K":
            return lambda dt: _pad(_hour_of_halfday(dt), count)
        if letter == "h":
            return lambda dt: _pad(_hour_of_halfday(dt) or 12, count)
        if letter == "m":
            return lambda dt: _pad(dt.minute, count)
        if letter == "s":
            return lambda dt: _pad(dt.second, count)
        if letter == "S":
            return lambda dt: f"{dt.microsecond:06d}".ljust(count, "0")[:count]
        if letter == "a":
            am, pm = _HALFDAY_TEXT.get(lang, _HALFDAY_TEXT[_FALLBACK_LANGUAGE])
            return lambda dt: am if dt.hour < 12 else pm
        if letter == "y":
            if count == 2:
                return lambda dt: _pad(dt.year % 100, 2)
            return lambda dt: _pad(dt.year, count)
        if letter == "M":
            months = _MONTHS.get(lang, _MONTHS[_FALLBACK_LANGUAGE])
            if count >= 4:
                return lambda dt: months[dt.month - 1]
            if count == 3:
                return lambda dt: months[dt.month - 1][:3]
            return lambda dt: _pad(dt.month, count)
        if letter == "d":
            return lambda dt: _pad(dt.day, count)
        if letter == "D":
            return lambda dt: _pad(dt.timetuple().tm_yday, count)
        if letter == "E":
            days = _WEEKDAYS.get(lang, _WEEKDAYS[_FALLBACK_LANGUAGE])
            if count >= 4:
                return lambda dt: days[dt.weekday()]
            return lambda dt: days[dt.weekday()][:3]
        if letter == "z":
            if count >= 4:
                return _zone_id
            return lambda dt: dt.tzname() or ""
        if letter == "Z":
            if count >= 3:
                return _zone_id
            return lambda dt: _offset_text(dt, colon=count == 2)
        raise AssertionError(f"unhandled pattern letter {letter!r}")
