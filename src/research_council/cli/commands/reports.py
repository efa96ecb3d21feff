"""Report commands."""

from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown

from research_council.cli.commands import fail, get_council
from research_council.cli.output import create_reports_table
from research_council.errors import CouncilError
from research_council.reports.models import DetailLevel, ReportFormat


@click.group("report")
def report_group() -> None:
    """Generate and list reports."""
    pass


@report_group.command("generate")
@click.argument("conversation_id")
@click.option("--title", help="Report title (default: the conversation topic).")
@click.option(
    "--format",
    "report_format",
    type=click.Choice([f.value for f in ReportFormat]),
    default=ReportFormat.STANDARD.value,
    show_default=True,
)
@click.option("--style", default="concise", show_default=True)
@click.option(
    "--detail",
    type=click.Choice([d.value for d in DetailLevel]),
    help="Detail level (default: derived from the format).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the report to this Markdown file.",
)
@click.pass_context
def generate(
    ctx: click.Context,
    conversation_id: str,
    title: str | None,
    report_format: str,
    style: str,
    detail: str | None,
    output: Path | None,
) -> None:
    """Generate a report from a conversation's memories and the entity graph."""
    console: Console = ctx.obj["console"]
    try:
        report = get_council(ctx).reports.generate(
            conversation_id,
            title=title,
            report_format=report_format,
            style=style,
            detail_level=detail,
        )
    except CouncilError as e:
        fail(console, e)

    markdown = report.to_markdown()
    if output is not None:
        output.write_text(markdown, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output}")
    else:
        console.print(Markdown(markdown))
    console.print(f"[dim]Report {report.id} (version {report.version_number})[/dim]")


@report_group.command("list")
@click.option("--conversation", "conversation_id", help="Conversation ID.")
@click.option("--limit", default=50, show_default=True)
@click.pass_context
def list_reports(ctx: click.Context, conversation_id: str | None, limit: int) -> None:
    """List generated reports, newest first."""
    console: Console = ctx.obj["console"]
    reports = get_council(ctx).report_store.list_recent(conversation_id, limit)
    if not reports:
        console.print("[yellow]No reports found.[/yellow]")
        return
    console.print(create_reports_table(reports))
