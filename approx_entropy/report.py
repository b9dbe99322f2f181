from enum import Enum
from pathlib import Path
from typing import List, Optional

import attr


class Severity(Enum):
    """Represents possible problems encountered during execution"""

    ERROR = "ERROR"
    WARNING = "WARNING"


@attr.define(kw_only=True)
class Report:
    """A common base class for different reports"""


@attr.define(kw_only=True)
class ErrorReport(Report):
    severity: Severity


@attr.define(kw_only=True)
class UnknownError(ErrorReport):
    """Describes an exception raised during input processing"""

    severity: Severity = Severity.ERROR
    exception: Exception


@attr.define(kw_only=True)
class EmptyInputReport(ErrorReport):
    """Metric entropy is not defined for an empty input"""

    severity: Severity = Severity.WARNING
    path: Optional[Path] = None


@attr.define(kw_only=True)
class EntropyReport(Report):
    path: Optional[Path] = None
    size: int
    entropy: float
    # None when the input is empty
    metric_entropy: Optional[float]
    logarithm: str


@attr.define(kw_only=True)
class BlockEntropyReport(Report):
    """Per block entropy, scaled to 0-100%"""

    percentages: List[float]
    block_size: int
    mean: float

    @property
    def highest(self) -> float:
        return max(self.percentages)

    @property
    def lowest(self) -> float:
        return min(self.percentages)
