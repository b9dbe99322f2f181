import math
from unittest import mock

import pytest

from approx_entropy import math as entropy_math
from approx_entropy.ln import exact_ln, fast_ln
from approx_entropy.math import (
    HISTOGRAM_SIZE,
    MAX_ENTROPY,
    byte_histogram,
    shannon_entropy,
    shannon_entropy_metric,
)

# Accepted error of the fast logarithm against the exact entropy
ABSOLUTE_ERROR = 1.0
RELATIVE_ERROR = 0.14

ALL_BYTES = bytes(range(256))
ODD_LENGTH = bytes([0, 0, 0, 0, 1, 1, 2, 2, 3, 4, 5])
# counts 4, 2, 2, 1, 1, 1 over 11 symbols
ODD_LENGTH_ENTROPY = 2.36852253
ODD_LENGTH_METRIC = 0.21532023


def assert_within_tolerance(found: float, expected: float, sigma: float):
    assert expected - sigma <= found <= expected + sigma
    assert abs(found - expected) <= max(found, expected) * RELATIVE_ERROR


@pytest.mark.parametrize(
    "data,entropy",
    [
        pytest.param(b"\x00" * 8, 0.0, id="zeros"),
        pytest.param(b"\x01" * 8, 0.0, id="ones"),
        pytest.param(bytes([0, 0, 1, 1, 0, 1, 0, 1]), 1.0, id="1 bit"),
        pytest.param(bytes([0, 0, 1, 1, 2, 2, 3, 3]), 2.0, id="2 bits"),
        pytest.param(bytes([0, 0, 0, 1, 1, 2, 3, 4]), 2.15563906, id="uneven"),
        pytest.param(bytes([1, 2, 3, 4, 5, 6, 7, 8]), 3.0, id="3 bits"),
        pytest.param(ALL_BYTES, 8.0, id="all unique bytes"),
        pytest.param(ODD_LENGTH, ODD_LENGTH_ENTROPY, id="odd length"),
    ],
)
class TestShannonEntropy:
    def test_fast_ln(self, data: bytes, entropy: float):
        found = shannon_entropy(data)

        assert_within_tolerance(found, entropy, ABSOLUTE_ERROR)
        assert found == pytest.approx(entropy, abs=1e-3)
        assert 0.0 <= found <= MAX_ENTROPY

    def test_exact_ln(self, data: bytes, entropy: float):
        assert shannon_entropy(data, exact_ln) == pytest.approx(entropy)


def test_odd_length_within_loose_tolerance():
    # 2.04037339 and 0.18548849 are only reachable with the loose
    # tolerance of the fast logarithm, the exact values are 2.3685 and 0.2153
    assert_within_tolerance(shannon_entropy(ODD_LENGTH), 2.04037339, ABSOLUTE_ERROR)
    assert_within_tolerance(
        shannon_entropy_metric(ODD_LENGTH),
        0.18548849,
        ABSOLUTE_ERROR / len(ODD_LENGTH),
    )


@pytest.mark.parametrize(
    "ln",
    [
        pytest.param(fast_ln, id="fast"),
        pytest.param(exact_ln, id="exact"),
    ],
)
def test_shannon_entropy_metric_odd_length(ln):
    found = shannon_entropy_metric(ODD_LENGTH, ln)

    assert found == pytest.approx(ODD_LENGTH_METRIC, abs=1e-4)
    assert 0.0 <= found <= 1.0


def test_shannon_entropy_metric_exact():
    assert shannon_entropy_metric(ODD_LENGTH, exact_ln) == pytest.approx(
        ODD_LENGTH_METRIC
    )


@pytest.mark.parametrize("length", [1, 2, 35, 1000])
def test_identical_symbols_have_no_entropy(length: int):
    data = b"\x42" * length
    assert shannon_entropy(data) == 0.0
    assert shannon_entropy_metric(data) == 0.0


def test_empty_input():
    assert shannon_entropy(b"") == 0.0
    assert shannon_entropy(iter(b"")) == 0.0
    assert math.isnan(shannon_entropy_metric(b""))
    assert math.isnan(shannon_entropy_metric(b"", exact_ln))


@pytest.mark.parametrize(
    "data",
    [
        pytest.param(bytearray(ALL_BYTES), id="bytearray"),
        pytest.param(memoryview(ALL_BYTES), id="memoryview"),
        pytest.param(list(ALL_BYTES), id="list"),
        pytest.param(iter(ALL_BYTES), id="iterator"),
        pytest.param((b for b in ALL_BYTES), id="generator"),
    ],
)
def test_bytes_like_input(data):
    assert shannon_entropy(data) == shannon_entropy(ALL_BYTES)


def test_metric_of_one_shot_iterator():
    expected = shannon_entropy_metric(ODD_LENGTH)

    assert shannon_entropy_metric(iter(ODD_LENGTH)) == expected
    assert shannon_entropy_metric(b for b in ODD_LENGTH) == expected


def test_input_is_read_once():
    with mock.patch.object(
        entropy_math, "byte_histogram", wraps=byte_histogram
    ) as histogram:
        shannon_entropy_metric(ODD_LENGTH)

    histogram.assert_called_once()


def test_input_is_not_mutated():
    data = bytearray([0, 0, 1, 1, 2, 2, 3, 3])
    shannon_entropy(data)
    shannon_entropy_metric(data)
    assert data == bytearray([0, 0, 1, 1, 2, 2, 3, 3])


def test_bounds_on_pseudo_random_input():
    # deterministic byte streams of varying length and symbol spread
    for length in range(1, 600, 7):
        for modulo in (2, 17, 256):
            data = bytes((i * 2654435761 >> 7) % modulo for i in range(length))
            entropy = shannon_entropy(data)
            metric = shannon_entropy_metric(data)

            assert 0.0 <= entropy <= MAX_ENTROPY
            assert 0.0 <= metric <= 1.0
            assert entropy == pytest.approx(shannon_entropy(data, exact_ln), abs=1e-3)


def test_zero_counts_are_skipped():
    calls = []

    def recording_ln(x: float) -> float:
        calls.append(x)
        return math.log(x)

    shannon_entropy(b"\x00\x00\x01\x01", recording_ln)

    # two occupied slots and ln(2), never ln(0)
    assert sorted(calls) == [0.5, 0.5, 2.0]


def test_uses_injected_logarithm():
    # a logarithm off by a constant factor cancels out in the base 2 conversion
    def scaled_ln(x: float) -> float:
        return 3.0 * fast_ln(x)

    data = bytes([0, 0, 0, 1, 1, 2, 3, 4])
    assert shannon_entropy(data, scaled_ln) == pytest.approx(shannon_entropy(data))


class TestByteHistogram:
    def test_size(self):
        assert len(byte_histogram(b"")) == HISTOGRAM_SIZE
        assert len(byte_histogram(b"\x00")) == HISTOGRAM_SIZE

    def test_counts(self):
        histogram = byte_histogram(b"\x00\x00\xff\x10")

        assert histogram[0] == 2
        assert histogram[0x10] == 1
        assert histogram[0xFF] == 1
        assert sum(histogram) == 4

    def test_sum_is_length(self):
        data = bytes(range(256)) * 3 + b"abc"
        assert sum(byte_histogram(data)) == len(data)
