from .abundance import (
    AbundanceMatrix,
    sample_periods,
    taxonomy_labels,
    taxonomy_lookup,
)

__all__ = ["AbundanceMatrix", "sample_periods", "taxonomy_labels", "taxonomy_lookup"]
