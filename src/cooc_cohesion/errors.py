"""Exception and warning types raised by :mod:`cooc_cohesion`.

Hard failures derive from :class:`CoocCohesionError`.  Numerical
degeneracies that must not abort a batch (undefined correlations, empty
period networks, undefined cohesion ratios) are reported as warnings so the
caller decides whether to escalate them with :mod:`warnings` filters.
"""

from __future__ import annotations

__all__ = [
    "CoocCohesionError",
    "InsufficientSamplesError",
    "InvalidAbundanceError",
    "UndefinedCorrelationWarning",
    "EmptyGraphWarning",
    "UndefinedRatioWarning",
]


class CoocCohesionError(Exception):
    """Base class for errors raised by this package."""


class InsufficientSamplesError(CoocCohesionError, ValueError):
    """Fewer than two samples were supplied to a correlation computation."""

    def __init__(self, n_samples: int, context: str = ""):
        self.n_samples = n_samples
        self.context = context
        where = f" ({context})" if context else ""
        super().__init__(
            f"Pearson correlation needs at least 2 samples; received {n_samples}{where}."
        )


class InvalidAbundanceError(CoocCohesionError, ValueError):
    """Abundance data violates the matrix invariants."""


class UndefinedCorrelationWarning(RuntimeWarning):
    """A taxon has zero variance, so its correlations are undefined."""


class EmptyGraphWarning(UserWarning):
    """A period keeps no taxa after the abundance cutoff."""


class UndefinedRatioWarning(RuntimeWarning):
    """``Cohesion_pos`` is zero, so the negative/positive ratio is undefined."""
