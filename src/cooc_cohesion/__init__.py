"""Co-occurrence networks and cohesion scores for microbial communities."""

from .config.analysis import AnalysisConfig
from .config.const import *  # noqa: F401,F403
from .errors import (
    CoocCohesionError,
    EmptyGraphWarning,
    InsufficientSamplesError,
    InvalidAbundanceError,
    UndefinedCorrelationWarning,
    UndefinedRatioWarning,
)
from .utils import *  # noqa: F401,F403
from .cohesion import CohesionRecord, cohesion_to_frame, compute_cohesion, score_sample
from .workflow import (
    PeriodNetworkResult,
    PipelineResult,
    analyze_period,
    compute_global_connectedness,
    hub_taxa,
    run_pipeline,
)
from .compare import PeriodComparison, compare_periods
from .io import (
    load_abundance_table,
    load_sample_metadata,
    load_taxonomy_table,
    network_to_frames,
    read_network,
    write_cohesion,
    write_network,
    write_summary,
)

__version__ = "0.1.0"
