from typing import List

import pluggy

from approx_entropy.models import Logarithm

hookspec = pluggy.HookspecMarker("approx_entropy")


@hookspec
def approx_entropy_register_logarithms() -> List[Logarithm]:
    """Register natural logarithm implementations usable by the estimator.

    :returns: The list of logarithms to be registered
    """
    return []
