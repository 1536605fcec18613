"""Normalization of literal values into JSON-compatible wire values.

Used for both predicate literals and mutation input.  Strings, numbers,
booleans and ``None`` pass through untouched; no value is ever coerced
into a different JSON type than the one it naturally maps to.

Python value                         Wire value
-----------------------------------  ---------------------------------
``str``, ``int``, ``float``, ``bool``  unchanged
``None``                             ``None`` (JSON ``null``)
``decimal.Decimal``                  ``int`` if integral, else ``float``
                                     (including infinities and NaN)
``datetime.datetime``                ISO-8601 text (``AWSDateTime``)
``datetime.date``                    ISO-8601 text (``AWSDate``)
``datetime.time``                    ISO-8601 text (``AWSTime``)
``enum.Enum`` member                 the member's name
``list`` / ``tuple``                 ``list`` of normalized items
"""
from __future__ import annotations

import datetime
from decimal import Decimal
from enum import Enum


def normalize_literal(value: object) -> object:
    """Return *value* in the form it is sent over the wire."""
    # str/int-backed enums are also str/int instances; match them first.
    if isinstance(value, Enum):
        return value.name
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    # datetime is a subclass of date, so it must be checked first.
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [normalize_literal(item) for item in value]
    return value
