#!/usr/bin/env python3
import math
import sys

import atheris.import_hook
import atheris.instrument_bytecode

with atheris.import_hook.instrument_imports(include=["approx_entropy"]):
    from approx_entropy.ln import exact_ln
    from approx_entropy.math import (
        MAX_ENTROPY,
        shannon_entropy,
        shannon_entropy_metric,
    )


@atheris.instrument_bytecode.instrument_func
def test_entropy_bounds(data):
    entropy = shannon_entropy(data)
    metric_entropy = shannon_entropy_metric(data)

    if not len(data):
        assert entropy == 0.0
        assert math.isnan(metric_entropy)
        return

    assert 0.0 <= entropy <= MAX_ENTROPY
    assert 0.0 <= metric_entropy <= 1.0
    assert abs(entropy - shannon_entropy(data, exact_ln)) < 1e-3


if __name__ == "__main__":
    atheris.Setup(sys.argv, test_entropy_bounds)
    atheris.Fuzz()
