"""Approximate Shannon entropy of byte sequences.

The estimator builds a fixed 256 slot histogram, one slot per byte value,
and reduces it to bits per byte with an injected natural logarithm. The
logarithm is only ever called with ``count / n`` (in ``(0, 1]``) and ``2``.
"""

import math
from typing import Iterable, List, Tuple

from .ln import fast_ln
from .models import LnFunction

HISTOGRAM_SIZE = 256
# log2(HISTOGRAM_SIZE)
MAX_ENTROPY = 8.0


def byte_histogram(data: Iterable[int]) -> List[int]:
    counts = [0] * HISTOGRAM_SIZE
    for b in data:
        counts[b] += 1
    return counts


def _entropy_and_length(data: Iterable[int], ln: LnFunction) -> Tuple[float, int]:
    counts = byte_histogram(data)
    # single pass, so one-shot iterators work too
    length = sum(counts)
    if not length:
        return 0.0, 0

    n = float(length)
    ent = 0.0
    for c in counts:
        # 0 * ln(0) would be NaN
        if c == 0:
            continue
        ent += c * ln(c / n)

    # ent is never positive, the sign is dropped while converting nats to bits
    return abs(ent) / (n * ln(2.0)), length


def shannon_entropy(data: Iterable[int], ln: LnFunction = fast_ln) -> float:
    """Shannon entropy of ``data`` in bits per byte, between 0 and 8.

    ``data`` is any bytes-like object or iterable of ints in ``[0, 255]``,
    it is only read once. Empty input yields ``0.0``.
    """
    entropy, _length = _entropy_and_length(data, ln)
    return entropy


def shannon_entropy_metric(data: Iterable[int], ln: LnFunction = fast_ln) -> float:
    """Shannon entropy divided by the input length, between 0 and 1.

    The caller is expected to check for empty input: like an unchecked
    IEEE 754 ``0.0 / 0`` division the result is then ``nan``.
    """
    entropy, length = _entropy_and_length(data, ln)
    if not length:
        return math.nan
    return entropy / length
