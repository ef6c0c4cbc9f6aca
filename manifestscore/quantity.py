"""Kubernetes resource quantities such as ``500m``, ``256Mi`` or ``1e3``."""

from __future__ import annotations

import re
from fractions import Fraction
from typing import Union

_NUMBER_RE = re.compile(r"([+-]?)(\d+(?:\.\d*)?|\.\d+)(.*)", re.DOTALL)
_EXPONENT_RE = re.compile(r"[eE]([+-]?\d+)")

_SUFFIXES: dict[str, Fraction] = {
    "Ki": Fraction(2) ** 10,
    "Mi": Fraction(2) ** 20,
    "Gi": Fraction(2) ** 30,
    "Ti": Fraction(2) ** 40,
    "Pi": Fraction(2) ** 50,
    "Ei": Fraction(2) ** 60,
    "n": Fraction(10) ** -9,
    "u": Fraction(10) ** -6,
    "m": Fraction(10) ** -3,
    "": Fraction(1),
    "k": Fraction(10) ** 3,
    "M": Fraction(10) ** 6,
    "G": Fraction(10) ** 9,
    "T": Fraction(10) ** 12,
    "P": Fraction(10) ** 15,
    "E": Fraction(10) ** 18,
}


class QuantityError(ValueError):
    """A value that is not a valid resource quantity."""


def _multiplier(suffix: str, text: str) -> Fraction:
    if suffix in _SUFFIXES:
        return _SUFFIXES[suffix]
    exponent = _EXPONENT_RE.fullmatch(suffix)
    if exponent is None:
        raise QuantityError(f"unable to parse quantity's suffix in {text!r}")
    return Fraction(10) ** int(exponent.group(1))


def parse_quantity(value: Union[str, int, float]) -> Fraction:
    """Return the exact numeric value of a quantity.

    Raises QuantityError if the value cannot be read as a quantity.
    """
    if isinstance(value, bool):
        raise QuantityError(f"{value!r} is not a quantity")
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, float):
        return Fraction(repr(value))
    if not isinstance(value, str):
        raise QuantityError(f"{value!r} is not a quantity")

    match = _NUMBER_RE.fullmatch(value)
    if match is None:
        raise QuantityError(f"quantities must match the regular expression, got {value!r}")
    sign, number, suffix = match.groups()
    return Fraction(sign + number) * _multiplier(suffix, value)