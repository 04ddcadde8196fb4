from .datamanag import AbundanceMatrix, sample_periods, taxonomy_labels, taxonomy_lookup
from .corrmat import *  # noqa: F401,F403
from .metrics import *  # noqa: F401,F403
from .clustering import *  # noqa: F401,F403
