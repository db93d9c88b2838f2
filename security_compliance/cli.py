"""
Security Compliance CLI - Main entry point.
"""

import sys

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
import logging

from .monitor.github_monitor import get_client, list_repositories
from .monitor.checks import scan_repositories
from .alerting.thresholds import build_report, find_unknown_checks, format_summary_line
from .alerting.notifiers import send_compliance_report_to_slack
from .report.writers import write_all_reports
from .utils.settings import load_settings, parse_formats
from .models import Report

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

console = Console()


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(debug):
    """Security compliance audit for the authenticated GitHub account."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.option("--config", default=None, help="Path to settings file (default: config/settings.yml if present)")
@click.option("--output", default=None, help="HTML report path (default: compliance-report.html)")
@click.option("--formats", default=None, help="Report formats, comma separated: html,json,md")
@click.option("--notify", is_flag=True, default=False, help="Send the summary to Slack (SLACK_WEBHOOK_URL)")
def audit(config, output, formats, notify):
    """Scan repositories and write the compliance report."""

    try:
        settings = load_settings(config)
        github_cfg = settings["github"]
        report_cfg = settings["report"]
        output = output or report_cfg["output"]
        selected_formats = parse_formats(formats) if formats else report_cfg["formats"]

        gh = get_client(api_base=github_cfg["api_base"], per_page=github_cfg["per_page"])
        repositories = list_repositories(gh, per_page=github_cfg["per_page"], sort=github_cfg["sort"])

        results = scan_repositories(gh, repositories, console)
        report = build_report(results)

        report_paths = write_all_reports(output, report, selected_formats)

        console.print(f"\n✅ Compliance report generated: {report_paths['html']}", markup=False, soft_wrap=True)
        for format_name, path in report_paths.items():
            if format_name != "html":
                console.print(f"   • {format_name.upper()}: {path}", markup=False, soft_wrap=True)
        console.print(format_summary_line(report.compliance_summary), markup=False, highlight=False, soft_wrap=True)

        display_summary(report)
        display_undetermined(report)

        if notify:
            if send_compliance_report_to_slack(report):
                console.print("[green]✅ Slack notification sent[/green]")
            else:
                console.print("[yellow]⚠️ Slack notification skipped or failed[/yellow]")

    except Exception as e:
        console.print(f"\n[red]Fatal error: {escape(str(e))}[/red]")
        logger.exception("Fatal error in audit command")
        sys.exit(1)

    sys.exit(0)


@cli.command()
@click.option("--config", default=None, help="Path to settings file")
def print_config(config):
    """Print effective configuration."""
    try:
        data = load_settings(config)

        console.print(Panel.fit("[bold]Effective Configuration[/bold]"))
        console.print_json(data=data)

    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def display_undetermined(report: Report):
    """Show checks that errored instead of answering."""
    unknown = find_unknown_checks(report)
    if not unknown:
        return

    logger.warning(f"{len(unknown)} check(s) could not be determined and were scored as failed")

    table = Table(title="Undetermined Checks", show_header=True)
    table.add_column("Repository", style="cyan")
    table.add_column("Check", style="yellow")

    for full_name, check in unknown[:20]:
        table.add_row(escape(full_name), check)

    console.print(table)

    if len(unknown) > 20:
        console.print(f"[yellow]... and {len(unknown) - 20} more[/yellow]")


def display_summary(report: Report):
    """Display compliance summary table."""
    summary = report.compliance_summary
    table = Table(title="Compliance Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Repositories", str(report.total_repos))
    table.add_row("Compliant", str(summary.compliant))
    table.add_row("Partial", str(summary.partial))
    table.add_row("Non-Compliant", str(summary.non_compliant))

    console.print(table)


if __name__ == "__main__":
    cli()
