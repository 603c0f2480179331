"""
battsizing/fuse_selector.py
===========================
Mobile Base Battery Sizing — Main Fuse Selection

Selection rule:
    1. I_fuse = I_batt,peak · margin
    2. Pick the smallest standard rating ≥ I_fuse.
    3. If none qualifies, fall back to the largest standard rating, flag the
       result and emit :class:`~battsizing.errors.RatingExceededWarning`.

Ratings are always taken from the catalog; a non-standard value is never
invented.

Scope:
    - Deterministic, rule-based decision logic only.
    - Each call to select() is stateless and idempotent given the same inputs.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable

from battsizing.catalog import FuseSelection
from battsizing.errors import RatingExceededWarning

logger = logging.getLogger(__name__)


class FuseSelector:
    """Picks the main battery fuse from a fixed catalog of standard ratings.

    Args:
        catalog:        Standard fuse ratings [A]; sorted ascending on
                        construction.  e.g. ATC blade 5 A … 80 A.
        safety_margin:  Multiplier on peak current, must exceed 1.0.
                        e.g. 1.2 adds 20 % headroom.

    Raises:
        ValueError: If the catalog is empty or holds a non-positive rating,
                    or ``safety_margin`` ≤ 1.0.
    """

    def __init__(self, catalog: Iterable[float], safety_margin: float = 1.2) -> None:
        ratings = tuple(sorted(catalog))
        if not ratings:
            raise ValueError("Fuse catalog must contain at least one rating")
        if ratings[0] <= 0.0:
            raise ValueError(
                f"Fuse ratings must be positive; received rating={ratings[0]!r}"
            )
        if safety_margin <= 1.0:
            raise ValueError(
                f"Fuse safety margin must exceed 1.0; received safety_margin={safety_margin!r}"
            )
        self._catalog: tuple[float, ...] = ratings
        self._safety_margin: float = safety_margin

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def select(self, peak_current_a: float) -> FuseSelection:
        """Choose the fuse for the given peak battery current.

        Args:
            peak_current_a:  Peak battery current [A], non-negative.

        Returns:
            :class:`FuseSelection`.  ``exceeded_catalog`` is True when the
            returned rating is ``max(catalog)`` because nothing larger exists.

        Raises:
            ValueError: If ``peak_current_a`` is negative.

        Warns:
            RatingExceededWarning: If no standard rating covers the margin current.

        Example:
            >>> FuseSelector(STANDARD_FUSES_A, 1.2).select(18.0).rating_a
            25.0
        """
        if peak_current_a < 0.0:
            raise ValueError(
                f"Peak current must be non-negative; received peak_current_a={peak_current_a!r}"
            )
        margin_current_a = peak_current_a * self._safety_margin

        rating = next((r for r in self._catalog if r >= margin_current_a), None)
        exceeded = rating is None
        if exceeded:
            rating = self._catalog[-1]
            warnings.warn(
                RatingExceededWarning(
                    f"Margin current {margin_current_a:.2f} A exceeds the largest "
                    f"standard fuse ({rating:g} A); using {rating:g} A"
                ),
                stacklevel=2,
            )
        else:
            logger.debug("fuse %.1f A covers margin current %.2f A", rating, margin_current_a)

        return FuseSelection(
            peak_current_a=peak_current_a,
            margin_current_a=margin_current_a,
            rating_a=rating,
            exceeded_catalog=exceeded,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> tuple[float, ...]:
        """Standard ratings [A], ascending."""
        return self._catalog

    @property
    def safety_margin(self) -> float:
        return self._safety_margin
