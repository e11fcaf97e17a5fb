"""Click-based CLI interface for vulnreport."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from vulnreport.codec import DecodeError, decode, decode_native, encode, encode_native
from vulnreport.config import TIME_FORMATS, Config, load_config
from vulnreport.models import Report
from vulnreport.scoring import SeverityRank, aggregate_score, security_status
from vulnreport.validation import ValidationError

SEVERITY_CHOICES = [s.value for s in SeverityRank]

CODECS = {
    "string": (encode, decode),
    "native": (encode_native, decode_native),
}

SEVERITY_COLORS = {
    SeverityRank.CRITICAL: "bold red",
    SeverityRank.HIGH: "red",
    SeverityRank.MEDIUM: "yellow",
    SeverityRank.LOW: "cyan",
    SeverityRank.NONE: "dim",
}

STATUS_COLORS = {
    "A": "bold green",
    "B": "green",
    "C": "yellow",
    "D": "yellow",
    "E": "red",
    "F": "bold red",
}

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _read_report(path: str, fmt: str) -> Report:
    _, decoder = CODECS[fmt]
    logger.debug("reading %s report from %s", fmt, path)
    return decoder(Path(path).read_bytes())


@click.group()
@click.version_option(package_name="vulnreport")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .vulnreport.yml config file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, config_path, verbose):
    """vulnreport - validate, convert and score check vulnerability reports."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path, project_root=".")
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(TIME_FORMATS), default=None,
              help="Timestamp encoding of the input.")
@click.pass_context
def validate(ctx, path, fmt):
    """Decode a report and check it is complete and well formed."""
    config: Config = ctx.obj["config"]
    console = Console()
    try:
        report = _read_report(path, fmt or config.time_format)
        report.validate()
    except (DecodeError, ValidationError) as exc:
        console.print(f"[bold red]INVALID[/] {escape(path)}: {escape(str(exc))}", highlight=False, soft_wrap=True)
        sys.exit(1)
    console.print(f"[bold green]OK[/] {escape(path)}", highlight=False, soft_wrap=True)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--to", "to_fmt", type=click.Choice(TIME_FORMATS), required=True,
              help="Timestamp encoding of the output.")
@click.option("--from", "from_fmt", type=click.Choice(TIME_FORMATS), default=None,
              help="Timestamp encoding of the input.")
@click.option("--output", "-o", type=str, default=None, help="Write the converted report to file.")
@click.pass_context
def convert(ctx, path, to_fmt, from_fmt, output):
    """Re-encode a report with a different timestamp encoding."""
    config: Config = ctx.obj["config"]
    try:
        report = _read_report(path, from_fmt or config.time_format)
    except DecodeError as exc:
        raise click.ClickException(f"{path}: {exc}") from exc

    encoder, _ = CODECS[to_fmt]
    out = encoder(report, indent=config.indent).decode()
    if output:
        Path(output).write_text(out)
        click.echo(f"Report written to {output}")
    else:
        click.echo(out)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(TIME_FORMATS), default=None,
              help="Timestamp encoding of the input.")
@click.option("--severity", "min_severity", type=click.Choice(SEVERITY_CHOICES), default=None)
@click.option("--exit-code", is_flag=True, help="Exit with code 1 if findings >= severity.")
@click.pass_context
def score(ctx, path, fmt, min_severity, exit_code):
    """Score the findings of a report and grade its security status."""
    config: Config = ctx.obj["config"]
    try:
        report = _read_report(path, fmt or config.time_format)
    except DecodeError as exc:
        raise click.ClickException(f"{path}: {exc}") from exc

    sev = SeverityRank(min_severity) if min_severity else config.min_severity

    for v in report.vulnerabilities:
        v.recompute_score()

    console = Console()
    if report.vulnerabilities:
        table = Table(title=escape(f"{report.checktype_name} on {report.target}"), show_lines=True)
        table.add_column("Severity", width=10)
        table.add_column("Score", width=6, justify="right")
        table.add_column("Summary", width=50)
        table.add_column("Findings", width=8, justify="right")

        ordered = sorted(report.vulnerabilities, key=lambda v: v.score, reverse=True)
        for v in ordered:
            rank = v.severity()
            color = SEVERITY_COLORS[rank]
            table.add_row(
                f"[{color}]{rank.value}[/]",
                f"{v.score:.1f}",
                escape(v.summary),
                str(len(v.vulnerabilities) or 1),
            )
        console.print()
        console.print(table)
    else:
        console.print("\n[bold green]No findings.[/]")

    total = aggregate_score(report.vulnerabilities)
    status = security_status(total)
    console.print(
        f"\n[bold]Score:[/] {total:.1f} | "
        f"[bold]Security status:[/] [{STATUS_COLORS[status]}]{status}[/]\n",
        highlight=False,
        soft_wrap=True,
    )

    if exit_code and any(v.severity() >= sev for v in report.vulnerabilities):
        sys.exit(1)
