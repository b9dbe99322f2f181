from .ln import exact_ln, fast_ln
from .math import byte_histogram, shannon_entropy, shannon_entropy_metric

__all__ = [
    "byte_histogram",
    "exact_ln",
    "fast_ln",
    "shannon_entropy",
    "shannon_entropy_metric",
]
