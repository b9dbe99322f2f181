import json
from enum import Enum
from pathlib import Path
from typing import Callable, List, Tuple, Type, TypeVar

import attr
from structlog import get_logger

from .report import ErrorReport, Report

logger = get_logger()

# A natural logarithm, defined for positive finite input
LnFunction = Callable[[float], float]

ReportType = TypeVar("ReportType", bound=Report)


@attr.define(frozen=True)
class Logarithm:
    """A named natural logarithm implementation.

    The entropy estimator only needs ``ln(x)`` for ``0 < x <= 1`` and for
    ``x == 2``; any implementation returning finite values there can be
    plugged in.
    """

    name: str
    function: LnFunction = attr.field(repr=False, eq=False)
    description: str = ""

    def __call__(self, x: float) -> float:
        return self.function(x)


Logarithms = Tuple[Logarithm, ...]


@attr.define
class ProcessResult:
    reports: List[Report] = attr.field(factory=list)

    @property
    def errors(self) -> List[ErrorReport]:
        return self.filter_reports(ErrorReport)

    def add_report(self, report: Report):
        self.reports.append(report)

    def filter_reports(self, report_class: Type[ReportType]) -> List[ReportType]:
        return [report for report in self.reports if isinstance(report, report_class)]

    def to_json(self, indent="  "):
        return to_json(self.reports, indent=indent)


class _JSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if attr.has(type(obj)):
            attr_output = attr.asdict(obj, recurse=False)
            attr_output["__typename__"] = obj.__class__.__name__
            return attr_output

        if isinstance(obj, Enum):
            return obj.name

        if isinstance(obj, Path):
            return str(obj)

        if isinstance(obj, Exception):
            return repr(obj)

        logger.error("JSONEncoder met a non-JSON encodable value", obj=obj)
        # instead of failing, just return something usable
        return f"Non-JSON encodable value: {obj}"


def to_json(obj, indent="  ") -> str:
    """Encode reports as a serialized JSON."""
    return json.dumps(obj, cls=_JSONEncoder, indent=indent)
