#!/usr/bin/env python3
import sys
from pathlib import Path
from typing import Iterable, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from structlog import get_logger

from .ln import (
    BUILTIN_LOGARITHMS,
    DEFAULT_LOGARITHM,
    UnknownLogarithmError,
    get_logarithm,
)
from .logging import configure_logger
from .models import Logarithm, Logarithms, ProcessResult
from .plugins import EntropyPluginManager
from .processing import EntropyConfig, process_bytes, process_file
from .report import BlockEntropyReport, EntropyReport, Severity

logger = get_logger()

STDIN = "-"


def show_logarithms(
    ctx: click.Context, _param: click.Option, value: bool  # noqa: FBT001
) -> None:
    if not value or ctx.resilient_parsing:
        return

    plugin_manager = ctx.params["plugin_manager"]
    plugins_path = ctx.params.get(
        "plugins_path"
    )  # may not exist, depends on parameter order...
    plugin_manager.import_plugins(plugins_path)
    logarithms = ctx.params["logarithms"] + tuple(
        plugin_manager.load_logarithms_from_plugins()
    )

    click.echo(pretty_format_logarithms(logarithms))
    ctx.exit(code=0)


def pretty_format_logarithms(logarithms: Iterable[Logarithm]) -> str:
    logarithms = list(logarithms)
    longest_name_length = max(len(logarithm.name) for logarithm in logarithms)
    lines = ["Available natural logarithm implementations:"]
    for logarithm in logarithms:
        lines.append(
            f"    {logarithm.name:<{longest_name_length}}    {logarithm.description}".rstrip()
        )
    return "\n".join(lines)


class EntropyContext(click.Context):
    def __init__(
        self,
        *args,
        logarithms: Optional[Logarithms] = None,
        plugin_manager: Optional[EntropyPluginManager] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        logarithms = logarithms or BUILTIN_LOGARITHMS
        plugin_manager = plugin_manager or EntropyPluginManager()

        self.params["logarithms"] = logarithms
        self.params["plugin_manager"] = plugin_manager


@click.command(
    help="Approximate Shannon entropy (bits per byte) of FILE, or of the standard input when FILE is - or missing.",
    context_settings=dict(help_option_names=["--help", "-h"]),
)
@click.argument(
    "file",
    type=click.Path(
        path_type=Path, dir_okay=False, exists=True, resolve_path=True, allow_dash=True
    ),
    default=STDIN,
)
@click.option(
    "-l",
    "--logarithm",
    "logarithm_name",
    default=DEFAULT_LOGARITHM.name,
    show_default=True,
    help="Natural logarithm implementation, see --show-logarithms.",
)
@click.option(
    "-b",
    "--blocks",
    "block_entropy",
    is_flag=True,
    show_default=True,
    help="Also calculate entropy for consecutive blocks of the input.",
)
@click.option(
    "--block-size",
    type=click.IntRange(1),
    default=None,
    help="Block size in bytes for --blocks. Calculated from the input size by default.",
)
@click.option(
    "--report",
    "report_file",
    type=click.Path(path_type=Path),
    help="File to store the calculated entropy values (in JSON format).",
)
@click.option(
    "-f",
    "--force",
    is_flag=True,
    show_default=True,
    help="Overwrite the report file if it exists.",
)
@click.option(
    "--log",
    "log_path",
    default=Path("approx_entropy.log"),
    type=click.Path(path_type=Path),
    help="File to save logs (in text format). Defaults to approx_entropy.log.",
)
@click.option(
    "-P",
    "--plugins-path",
    type=click.Path(path_type=Path, exists=True, resolve_path=True),
    default=None,
    help="Load plugins from the provided path.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Verbosity level, counting, maximum level: 3 (use: -v, -vv, -vvv)",
)
@click.option(
    "--show-logarithms",
    help="Shows the natural logarithm implementations available for --logarithm",
    is_flag=True,
    callback=show_logarithms,
    expose_value=False,
)
@click.version_option(
    package_name="approx-entropy",
    message="%(version)s",
    help="Shows approx-entropy version",
)
def cli(
    file: Path,
    logarithm_name: str,
    block_entropy: bool,  # noqa: FBT001
    block_size: Optional[int],
    report_file: Optional[Path],
    force: bool,  # noqa: FBT001
    log_path: Path,
    logarithms: Logarithms,
    plugins_path: Optional[Path],
    plugin_manager: EntropyPluginManager,
    verbose: int,
) -> ProcessResult:
    configure_logger(verbose, log_path)

    plugin_manager.import_plugins(plugins_path)
    logarithms += tuple(plugin_manager.load_logarithms_from_plugins())

    try:
        logarithm = get_logarithm(logarithm_name, logarithms)
    except UnknownLogarithmError:
        names = ", ".join(logarithm.name for logarithm in logarithms)
        raise click.BadParameter(
            f"{logarithm_name!r} is not one of {names}",
            param_hint="'-l' / '--logarithm'",
        ) from None

    config = EntropyConfig(
        logarithm=logarithm,
        block_entropy=block_entropy,
        block_size=block_size,
        entropy_plot=bool(verbose >= 3),
        force=force,
    )

    if str(file) == STDIN:
        logger.info("Start processing standard input")
        data = sys.stdin.buffer.read()
        process_result = process_bytes(config, data, report_file)
    else:
        logger.info("Start processing file", file=file)
        process_result = process_file(config, file, report_file)

    if verbose == 0:
        print_report(process_result)
    return process_result


cli.context_class = EntropyContext


def get_exit_code_from_reports(reports: ProcessResult) -> int:
    """1 when any report is an error, warnings do not change the exit code."""
    if any(error.severity == Severity.ERROR for error in reports.errors):
        return 1
    return 0


def format_metric_entropy(value: Optional[float]) -> str:
    if value is None:
        return "undefined"
    return f"{value:.8f}"


def print_report(reports: ProcessResult):
    console = Console()

    entropy_table = Table(title="Shannon entropy")
    entropy_table.add_column("Input", justify="left", style="#00FFC8")
    entropy_table.add_column("Size", justify="right", style="#00FFC8")
    entropy_table.add_column("Bits per byte", justify="right", style="#00FFC8")
    entropy_table.add_column("Metric entropy", justify="right", style="#00FFC8")
    entropy_table.add_column("Logarithm", justify="center", style="#00FFC8")

    for report in reports.filter_reports(EntropyReport):
        entropy_table.add_row(
            str(report.path) if report.path else "<stdin>",
            str(report.size),
            f"{report.entropy:.8f}",
            format_metric_entropy(report.metric_entropy),
            report.logarithm,
        )

    if entropy_table.row_count:
        console.print(entropy_table)

    for report in reports.filter_reports(BlockEntropyReport):
        summary = Panel(
            f"""Block size: [#00FFC8]{report.block_size}[/#00FFC8]
Blocks: [#00FFC8]{len(report.percentages)}[/#00FFC8]
Mean: [#00FFC8]{report.mean:0.2f}%[/#00FFC8]
Highest: [#00FFC8]{report.highest:0.2f}%[/#00FFC8]
Lowest: [#00FFC8]{report.lowest:0.2f}%[/#00FFC8]""",
            title="Block entropy",
        )
        console.print(summary)

    if len(reports.errors):
        errors_table = Table(title="Encountered errors")
        errors_table.add_column("Severity", justify="left", style="cyan", no_wrap=True)
        errors_table.add_column("Name", justify="left", style="cyan", no_wrap=True)

        for error in reports.errors:
            errors_table.add_row(str(error.severity), error.__class__.__name__)
        console.print(errors_table)


def main():
    try:
        result = cli.main(prog_name="approx-entropy", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except Exception:
        logger.exception("Unhandled exception during approx-entropy")
        sys.exit(1)

    # --help, --version and --show-logarithms end with an exit code
    if isinstance(result, int):
        sys.exit(result)
    sys.exit(get_exit_code_from_reports(result))


if __name__ == "__main__":
    main()
