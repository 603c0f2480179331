"""
battsizing/errors.py
====================
Mobile Base Battery Sizing — Error Kinds

Fatal conditions derive from :class:`SizingError`, itself a ``ValueError``,
so callers that already guard numeric inputs with ``except ValueError`` keep
working.  The fuse catalog shortfall is a warning, not an error: the sizing
run still completes with the largest standard rating.
"""

from __future__ import annotations


class SizingError(ValueError):
    """Base class for fatal battery sizing errors."""


class InvalidCatalogEntry(SizingError):
    """A component catalog row is physically inconsistent.

    Raised for a non-positive or non-integer quantity, a negative current,
    a nominal current above the maximum current, or a rail voltage that is
    not part of the configured power architecture.
    """


class ProfileError(SizingError):
    """Mission phases do not exactly partition the mission duration."""


class ProfileGapError(ProfileError):
    """Part of the mission timeline is not covered by any phase."""


class ProfileOverlapError(ProfileError):
    """Two phases claim the same time, or a phase runs past the mission end."""


class RatingExceededWarning(UserWarning):
    """No standard fuse covers the peak current with the required margin."""
