# -*- coding: utf-8 -*-
"""
Exceptions raised by chromalib.

DataFormatError and RangeError subclass ValueError, so code that already
catches ValueError around table loading or conversions keeps working.
"""

__all__ = ['DataFormatError', 'RangeError', 'DivisionByZeroError']


class DataFormatError(ValueError):
    """Malformed tabulated input: missing wavelength, missing or non-numeric channel."""


class RangeError(ValueError):
    """Input outside the valid range of a strict conversion."""


class DivisionByZeroError(ZeroDivisionError):
    """Undefined chromaticity: y = 0, or zero total power when normalizing."""
