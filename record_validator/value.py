"""
Single value validation.

ValueValidator wraps one value (string, number, boolean or list) and exposes
one method per check. Strings are trimmed on construction and None counts as
an empty value. Checks never raise: a value of the wrong type for a check, or
a comparison between incompatible values, records an error instead.

"regex" takes a bare Python pattern ("^[a-z]+$"), not a PCRE literal with
"/" delimiters.

Example:
    value = ValueValidator(" izisaurio ", "Name")
    if not value.is_required().is_safe_text().max_length(5).validate():
        print(value.get_errors())   # ['Name, 5 maxLength']
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from .checks import BaseValidator, check

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_DIGITS = re.compile(r"[0-9]+")
_NUMERIC = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SAFE_TEXT = re.compile(
    r"[a-zA-Z0-9áéíóúÁÉÍÓÚñÑäëïöüÄËÏÖÜ’ ?!%+\-,.;$¿¡=:´_/\\@()#'*|\r\n]+"
)
_DATE = r"[123][0-9]{3}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12][0-9]|3[01])"
_TIME = r"(?:(?:[01]?[0-9]|2[0-3]):(?:[0-5]?[0-9]):)?(?:[0-5]?[0-9])"
_DATE_RE = re.compile(_DATE)
_TIME_RE = re.compile(_TIME)
_DATETIME_RE = re.compile(_DATE + r"\s" + _TIME)
_EMAIL = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

_BOOL_STRINGS = ("1", "0", "yes", "no")


def _normalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_numeric(value: Any) -> bool:
    if _is_number(value):
        return not (isinstance(value, float) and math.isnan(value))
    return isinstance(value, str) and _NUMERIC.fullmatch(value) is not None


def _to_number(value: Any):
    if _is_number(value):
        return value
    if _DIGITS.fullmatch(value):
        try:
            return int(value)
        except ValueError:
            # digit strings past the interpreter's int conversion limit
            return Decimal(value)
    return float(value)


def _text(value: Any) -> Optional[str]:
    """String form of a scalar; None for containers, which have no text."""
    if isinstance(value, (list, tuple, dict, set)):
        return None
    return str(value)


def _compare(left: Any, right: Any) -> Optional[int]:
    """
    Three-way comparison of two normalized values.

    Numbers and numeric strings compare numerically, other strings compare
    lexically. Returns None when the two values are not comparable.
    """
    if _is_numeric(left) and _is_numeric(right):
        a, b = _to_number(left), _to_number(right)
    elif isinstance(left, str) and isinstance(right, str):
        a, b = left, right
    else:
        return None
    return (a > b) - (a < b)


def _parse_temporal(value: Any, fmt: str) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), fmt)
    except (TypeError, ValueError):
        return None


class ValueValidator(BaseValidator):
    """Validates a single value with chainable checks."""

    def __init__(self, value: Any, label: str, messages: Any = None):
        """
        Args:
            value: Value to validate; strings are trimmed, lists kept as-is
            label: Field label used in error messages
            messages: Flat message catalog, MessageFormatter, or None
        """
        super().__init__(label, messages)
        self.value = _normalize(value)

    @check("isRequired")
    def is_required(self):
        if self.value == "":
            self._add_error("isRequired")
        return self

    @check("isInt")
    def is_int(self):
        value = self.value
        is_int = (isinstance(value, int) and not isinstance(value, bool)) or (
            isinstance(value, str) and _DIGITS.fullmatch(value) is not None
        )
        if not is_int:
            self._add_error("isInt")
        return self

    @check("isNumeric")
    def is_numeric(self):
        if not _is_numeric(self.value):
            self._add_error("isNumeric")
        return self

    @check("isDecimal")
    def is_decimal(self):
        if not _is_numeric(self.value):
            self._add_error("isDecimal")
        return self

    @check("isSafeText")
    def is_safe_text(self):
        self._match(_SAFE_TEXT, "isSafeText")
        return self

    @check("isDatetime")
    def is_datetime(self):
        self._match(_DATETIME_RE, "isDatetime")
        return self

    @check("isDate")
    def is_date(self):
        self._match(_DATE_RE, "isDate")
        return self

    @check("isTime")
    def is_time(self):
        self._match(_TIME_RE, "isTime")
        return self

    @check("isBool")
    def is_bool(self):
        value = self.value
        if isinstance(value, bool):
            return self
        if type(value) is int and value in (0, 1):
            return self
        if isinstance(value, str) and value in _BOOL_STRINGS:
            return self
        self._add_error("isBool")
        return self

    @check("isEmail")
    def is_email(self):
        self._match(_EMAIL, "isEmail")
        return self

    @check("isArray")
    def is_array(self):
        if not isinstance(self.value, (list, tuple)):
            self._add_error("isArray")
        return self

    @check("regex")
    def regex(self, pattern):
        """
        Fail if the pattern is not found in the value (re.search semantics).

        The pattern is a bare Python regular expression: PCRE-style delimiters
        such as "/^a$/" are matched literally, so "^a$" is the form to use.
        Invalid patterns fail the check.
        """
        text = _text(self.value)
        try:
            matched = text is not None and re.search(pattern, text) is not None
        except (re.error, TypeError):
            matched = False
        if not matched:
            self._add_error("regex")
        return self

    @check("minLength")
    def min_length(self, length):
        """Fail if the UTF-8 encoded value is shorter than length bytes."""
        size = self._byte_length()
        if size is None or _compare(size, _normalize(length)) in (None, -1):
            self._add_error("minLength", length)
        return self

    @check("maxLength")
    def max_length(self, length):
        """Fail if the UTF-8 encoded value is longer than length bytes."""
        size = self._byte_length()
        if size is None or _compare(size, _normalize(length)) in (None, 1):
            self._add_error("maxLength", length)
        return self

    @check("mbMinLength")
    def mb_min_length(self, length):
        """Fail if the value has fewer than length characters."""
        size = self._char_length()
        if size is None or _compare(size, _normalize(length)) in (None, -1):
            self._add_error("mbMinLength", length)
        return self

    @check("mbMaxLength")
    def mb_max_length(self, length):
        """Fail if the value has more than length characters."""
        size = self._char_length()
        if size is None or _compare(size, _normalize(length)) in (None, 1):
            self._add_error("mbMaxLength", length)
        return self

    @check("min")
    def min(self, minimum):
        if _compare(self.value, _normalize(minimum)) in (None, -1):
            self._add_error("min", minimum)
        return self

    @check("max")
    def max(self, maximum):
        if _compare(self.value, _normalize(maximum)) in (None, 1):
            self._add_error("max", maximum)
        return self

    @check("greater")
    def greater(self, to, to_label=None):
        """Fail if the value is less than to. Equal values pass."""
        if _compare(self.value, _normalize(to)) in (None, -1):
            self._add_error("greater", self._other_label(to, to_label))
        return self

    @check("less")
    def less(self, to, to_label=None):
        """Fail if the value is greater than to. Equal values pass."""
        if _compare(self.value, _normalize(to)) in (None, 1):
            self._add_error("less", self._other_label(to, to_label))
        return self

    @check("equal")
    def equal(self, to, to_label=None):
        if not self._same(to):
            self._add_error("equal", self._other_label(to, to_label))
        return self

    @check("notEqual")
    def not_equal(self, to, to_label=None):
        if self._same(to):
            self._add_error("notEqual", self._other_label(to, to_label))
        return self

    @check("greaterDatetime")
    def greater_datetime(self, to, to_label=None, fmt=DATETIME_FORMAT):
        """Fail unless the value is strictly later than to."""
        self._temporal("greaterDatetime", to, to_label, fmt, later=True)
        return self

    @check("greaterDate")
    def greater_date(self, to, to_label=None, fmt=DATE_FORMAT):
        """Fail unless the value is a date strictly after to."""
        self._temporal("greaterDate", to, to_label, fmt, later=True)
        return self

    @check("lessDatetime")
    def less_datetime(self, to, to_label=None, fmt=DATETIME_FORMAT):
        """Fail unless the value is strictly earlier than to."""
        self._temporal("lessDatetime", to, to_label, fmt, later=False)
        return self

    @check("lessDate")
    def less_date(self, to, to_label=None, fmt=DATE_FORMAT):
        """Fail unless the value is a date strictly before to."""
        self._temporal("lessDate", to, to_label, fmt, later=False)
        return self

    def _match(self, pattern, key: str):
        text = _text(self.value)
        if text is None or pattern.fullmatch(text) is None:
            self._add_error(key)

    def _byte_length(self) -> Optional[int]:
        text = _text(self.value)
        return None if text is None else len(text.encode("utf-8"))

    def _char_length(self) -> Optional[int]:
        text = _text(self.value)
        return None if text is None else len(text)

    def _same(self, to) -> bool:
        other = _normalize(to)
        if _is_numeric(self.value) and _is_numeric(other):
            return _compare(self.value, other) == 0
        return self.value == other

    def _temporal(self, key: str, to, to_label, fmt: str, later: bool):
        mine = _parse_temporal(self.value, fmt)
        other = _parse_temporal(to, fmt)
        if mine is None or other is None:
            failed = True
        elif later:
            failed = mine <= other
        else:
            failed = mine >= other
        if failed:
            self._add_error(key, self._other_label(to, to_label))

    @staticmethod
    def _other_label(to, to_label) -> str:
        return str(to) if to_label is None else to_label
