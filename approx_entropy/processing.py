import mmap
from pathlib import Path
from typing import List, Optional

import attr
import plotext as plt
from structlog import get_logger

from .ln import DEFAULT_LOGARITHM
from .math import MAX_ENTROPY, shannon_entropy
from .models import LnFunction, Logarithm, ProcessResult
from .report import (
    BlockEntropyReport,
    EmptyInputReport,
    EntropyReport,
    UnknownError,
)

logger = get_logger()

DEFAULT_CHUNK_COUNT = 80
MIN_BLOCK_SIZE = 1024
MAX_BLOCK_SIZE = 1024 * 1024


@attr.define(kw_only=True)
class EntropyConfig:
    logarithm: Logarithm = DEFAULT_LOGARITHM
    block_entropy: bool = False
    # calculated from the input size when not set
    block_size: Optional[int] = None
    entropy_plot: bool = False
    force: bool = False


def process_file(
    config: EntropyConfig, input_path: Path, report_file: Optional[Path] = None
) -> ProcessResult:
    if not input_path.is_file():
        raise ValueError("input_path is not a file", input_path)

    if not prepare_report_file(config, report_file):
        logger.error("Input not processed, report can't be written", path=input_path)
        return ProcessResult()

    try:
        # empty files can't be mapped
        if input_path.stat().st_size == 0:
            process_result = _process_input(config, memoryview(b""), input_path)
        else:
            with input_path.open("rb") as f, mmap.mmap(
                f.fileno(), 0, access=mmap.ACCESS_READ
            ) as mapped, memoryview(mapped) as data:
                process_result = _process_input(config, data, input_path)
    except OSError as e:
        logger.error("Can not read input file", path=input_path, msg=str(e))
        process_result = ProcessResult()
        process_result.add_report(UnknownError(exception=e))

    write_json_report(report_file, process_result)
    return process_result


def process_bytes(
    config: EntropyConfig, data: bytes, report_file: Optional[Path] = None
) -> ProcessResult:
    if not prepare_report_file(config, report_file):
        logger.error("Input not processed, report can't be written")
        return ProcessResult()

    with memoryview(data) as view:
        process_result = _process_input(config, view)

    write_json_report(report_file, process_result)
    return process_result


def _process_input(
    config: EntropyConfig, data: memoryview, path: Optional[Path] = None
) -> ProcessResult:
    process_result = ProcessResult()
    process_result.add_report(calculate_entropy(data, config.logarithm, path=path))

    if not len(data):
        logger.warning("Empty input, metric entropy is undefined", path=path)
        process_result.add_report(EmptyInputReport(path=path))
        return process_result

    if config.block_entropy:
        report = calculate_block_entropy(
            data, ln=config.logarithm, block_size=config.block_size
        )
        if config.entropy_plot:
            logger.debug(
                "Entropy chart",
                chart="\n"
                + format_entropy_plot(report.percentages, report.block_size),
                _verbosity=3,
            )
        process_result.add_report(report)

    return process_result


def prepare_report_file(config: EntropyConfig, report_file: Optional[Path]) -> bool:
    """Check up front that the JSON report can be written.

    An existing report is only replaced with ``force``.
    """
    if report_file is None:
        return True

    try:
        if report_file.exists():
            if not config.force:
                logger.error(
                    "Report file exists and --force not specified", path=report_file
                )
                return False
            logger.warning("Removing existing report file", path=report_file)
            report_file.unlink()

        report_file.touch()
        report_file.unlink()
    except OSError as e:
        logger.error("Report file can't be written", path=report_file, msg=str(e))
        return False

    return True


def write_json_report(report_file: Optional[Path], process_result: ProcessResult):
    if report_file is None:
        return

    try:
        report_file.write_text(process_result.to_json())
    except OSError as e:
        logger.error("Can not write JSON report", path=report_file, msg=str(e))
    else:
        logger.info("JSON report written", path=report_file)


def calculate_entropy(
    data: memoryview, logarithm: Logarithm, path: Optional[Path] = None
) -> EntropyReport:
    size = len(data)
    logger.debug(
        "Calculating entropy", path=path, size=size, logarithm=logarithm.name
    )

    entropy = shannon_entropy(data, logarithm)
    # same as shannon_entropy_metric, without a second pass over the input
    metric_entropy = entropy / size if size else None

    logger.debug(
        "Entropy calculated", path=path, entropy=entropy, metric_entropy=metric_entropy
    )
    return EntropyReport(
        path=path,
        size=size,
        entropy=entropy,
        metric_entropy=metric_entropy,
        logarithm=logarithm.name,
    )


def calculate_block_entropy(
    data: memoryview, ln: LnFunction, block_size: Optional[int] = None
) -> BlockEntropyReport:
    """Shannon entropy of consecutive blocks, scaled from 0-8 bits to 0-100%.

    The mean is weighted by block length, as the last block may be shorter.
    Blocks are slices of ``data``, nothing is copied.
    """
    size = len(data)
    if block_size is None:
        block_size = calculate_block_size(
            size,
            chunk_count=DEFAULT_CHUNK_COUNT,
            min_limit=MIN_BLOCK_SIZE,
            max_limit=MAX_BLOCK_SIZE,
        )

    percentages = []
    weighted_sum = 0.0
    for offset in range(0, size, block_size):
        # released right away, the mapping can't be closed while views exist
        with data[offset : offset + block_size] as block:
            entropy = shannon_entropy(block, ln)
            weighted_sum += entropy * len(block)
        percentages.append(round(entropy / MAX_ENTROPY * 100, 2))

    report = BlockEntropyReport(
        percentages=percentages,
        block_size=block_size,
        mean=weighted_sum / size / MAX_ENTROPY * 100,
    )

    logger.debug(
        "Block entropy calculated",
        size=size,
        block_size=block_size,
        blocks=len(percentages),
        mean=report.mean,
        highest=report.highest,
        lowest=report.lowest,
    )
    return report


def calculate_block_size(
    size: int, *, chunk_count: int, min_limit: int, max_limit: int
) -> int:
    """Size of ``chunk_count`` even blocks, clamped to the limits."""
    return min(max(size // chunk_count, min_limit), max_limit)


def format_entropy_plot(percentages: List[float], block_size: int) -> str:
    plt.clf()
    plt.theme("clear")
    plt.plot_size(100, 16)
    plt.title("Entropy distribution")
    plt.xlabel(f"{block_size} bytes")
    plt.ylabel("entropy %")
    plt.scatter(percentages, marker="dot")
    plt.ylim(0, 100)
    plt.xticks(range(len(percentages) + 1))
    plt.yticks(range(0, 101, 10))
    return plt.build()
