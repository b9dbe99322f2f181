"""Natural logarithm implementations for the entropy estimator.

``fast_ln`` is a bounded error approximation made of a single ``frexp``
call and a degree 4 polynomial, usable where the exact transcendental
function is too slow or not available. ``exact_ln`` is ``math.log``.
"""

import math
from typing import Iterable

from .models import Logarithm, Logarithms

LN_2 = 0.6931471805599453

# float32 machine epsilon
F32_EPSILON = 1.1920929e-07

# Remez approximation of ln(y) for y in [1, 2), lowest order first
_LN_1TO2_COEFFICIENTS = (
    -1.7417939,
    2.8212026,
    -1.4699568,
    0.44717955,
    -0.056570851,
)

# Absolute error of fast_ln over its whole domain
FAST_LN_MAX_ERROR = 1e-4

# 1 / x overflows near this, smaller inputs are scaled up by 2**_SCALE_EXPONENT
_MIN_INVERTIBLE = 1e-300
_SCALE_EXPONENT = 64


class UnknownLogarithmError(KeyError):
    pass


def fast_ln(x: float) -> float:
    """Approximate natural logarithm.

    ``x`` is split into ``y * 2**k`` with ``y`` in ``[1, 2)``, so that
    ``ln(x) = k * ln(2) + ln(y)``, and ``ln(y)`` is evaluated with a
    polynomial. Values below 1 are inverted first, as ``ln(x) = -ln(1/x)``.
    The absolute error is below ``FAST_LN_MAX_ERROR`` and the result is
    finite for every positive finite ``x``, subnormals included.

    Raises ``ValueError`` for non-positive input, like ``math.log``.
    """
    if not x > 0.0:
        raise ValueError("math domain error")
    if math.isinf(x):
        return x
    if abs(x - 1.0) < F32_EPSILON:
        return 0.0
    if x < _MIN_INVERTIBLE:
        return fast_ln(math.ldexp(x, _SCALE_EXPONENT)) - _SCALE_EXPONENT * LN_2

    inverted = x < 1.0
    if inverted:
        x = 1.0 / x

    # frexp returns the mantissa in [0.5, 1)
    mantissa, exponent = math.frexp(x)
    y = mantissa * 2.0
    exponent -= 1

    c0, c1, c2, c3, c4 = _LN_1TO2_COEFFICIENTS
    ln_y = c0 + (c1 + (c2 + (c3 + c4 * y) * y) * y) * y

    result = exponent * LN_2 + ln_y
    return -result if inverted else result


def exact_ln(x: float) -> float:
    return math.log(x)


FAST_LOGARITHM = Logarithm(
    name="fast",
    function=fast_ln,
    description="Polynomial approximation, absolute error below 1e-4",
)
EXACT_LOGARITHM = Logarithm(
    name="exact",
    function=exact_ln,
    description="Python's math.log",
)

BUILTIN_LOGARITHMS: Logarithms = (FAST_LOGARITHM, EXACT_LOGARITHM)
DEFAULT_LOGARITHM = FAST_LOGARITHM


def get_logarithm(name: str, logarithms: Iterable[Logarithm]) -> Logarithm:
    for logarithm in logarithms:
        if logarithm.name == name:
            return logarithm
    raise UnknownLogarithmError(name)
