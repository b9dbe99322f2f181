import random

import pytest

from approx_entropy.ln import BUILTIN_LOGARITHMS
from approx_entropy.math import shannon_entropy

INPUT_SIZES = [1024, 64 * 1024, 1024 * 1024]


@pytest.mark.benchmark(group="param:input_size")
@pytest.mark.parametrize("input_size", INPUT_SIZES)
@pytest.mark.parametrize(
    "logarithm",
    [pytest.param(logarithm, id=logarithm.name) for logarithm in BUILTIN_LOGARITHMS],
)
def bench_shannon_entropy(input_size, logarithm, benchmark):
    data = random.Random(input_size).randbytes(input_size)

    entropy = benchmark(shannon_entropy, data, logarithm)

    assert 0.0 <= entropy <= 8.0
