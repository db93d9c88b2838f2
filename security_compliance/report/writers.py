"""
Report writers for HTML, Markdown, and JSON formats.
"""

from typing import Dict, List
from decimal import Decimal, ROUND_HALF_UP
from html import escape
import json
from pathlib import Path
import logging

from ..models import IMPLEMENTED_CHECKS, TOTAL_CHECKS, Report, RepositoryResult

logger = logging.getLogger(__name__)

GITHUB_WEB = "https://github.com"

HTML_STYLE = """
    body { font-family: system-ui; max-width: 1200px; margin: 0 auto; padding: 20px; }
    .summary { display: grid; grid-template-columns: repeat(3, 1fr); gap: 20px; margin: 20px 0; }
    .card { padding: 20px; border-radius: 8px; }
    .compliant { background: #10B98120; }
    .partial { background: #F59E0B20; }
    .non-compliant, .non_compliant { background: #EF444420; }
    table { width: 100%; border-collapse: collapse; }
    th, td { padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }
    .badge { padding: 4px 8px; border-radius: 4px; font-size: 12px; }
    .note { color: #666; font-size: 13px; }
"""


def format_percent(score: float) -> str:
    """Round to a whole percent, halves away from zero (12.5 -> 13%)."""
    rounded = Decimal(str(score)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{rounded}%"


def _render_row(result: RepositoryResult) -> str:
    h = escape
    repo_url = f"{GITHUB_WEB}/{result.full_name}"
    status = result.compliance.status.value
    return f"""
        <tr>
          <td><a href="{h(repo_url)}">{h(result.name)}</a></td>
          <td>{format_percent(result.compliance.score)}</td>
          <td><span class="badge {h(status)}">{h(status)}</span></td>
          <td><a href="{h(repo_url)}/security">View Details</a></td>
        </tr>"""


def render_html(report: Report) -> str:
    """Render the report as a self-contained HTML document."""
    h = escape
    summary = report.compliance_summary
    rows = "".join(_render_row(r) for r in report.repos)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Security Compliance Report</title>
  <style>{HTML_STYLE}  </style>
</head>
<body>
  <h1>Security Compliance Report</h1>
  <p>Generated: {h(report.timestamp)}</p>

  <div class="summary">
    <div class="card compliant">
      <h2>{summary.compliant}</h2>
      <p>Compliant</p>
    </div>
    <div class="card partial">
      <h2>{summary.partial}</h2>
      <p>Partial</p>
    </div>
    <div class="card non-compliant">
      <h2>{summary.non_compliant}</h2>
      <p>Non-Compliant</p>
    </div>
  </div>

  <table>
    <thead>
      <tr>
        <th>Repository</th>
        <th>Score</th>
        <th>Status</th>
        <th>Actions</th>
      </tr>
    </thead>
    <tbody>{rows}
    </tbody>
  </table>
  <p class="note">Scores cover {TOTAL_CHECKS} declared checks, of which {len(IMPLEMENTED_CHECKS)} are currently evaluated.</p>
</body>
</html>
"""


def write_html(path: str, report: Report) -> None:
    """Write HTML report, replacing any existing file."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_html(report))

    logger.info(f"HTML report written to {path}")


def write_markdown(path: str, report: Report) -> None:
    """Write markdown report."""
    summary = report.compliance_summary
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Security Compliance Report\n\n")
        f.write(f"Generated: {report.timestamp}\n\n")

        f.write("## Summary\n\n")
        f.write(f"- **Repositories**: {report.total_repos}\n")
        f.write(f"- **Compliant**: {summary.compliant}\n")
        f.write(f"- **Partial**: {summary.partial}\n")
        f.write(f"- **Non-Compliant**: {summary.non_compliant}\n\n")

        if report.repos:
            f.write("## Repositories\n\n")
            f.write("| Repository | Score | Status | Undetermined |\n")
            f.write("|------------|------:|--------|--------------|\n")
            for r in report.repos:
                name = r.full_name.replace("|", "\\|")
                undetermined = ", ".join(r.compliance.checks.unknown()) or "-"
                f.write(
                    f"| [{name}]({GITHUB_WEB}/{r.full_name}) | {format_percent(r.compliance.score)} "
                    f"| {r.compliance.status.value} | {undetermined} |\n"
                )
            f.write("\n")

        f.write("---\n\n")
        f.write(f"*Scores cover {TOTAL_CHECKS} declared checks, of which {len(IMPLEMENTED_CHECKS)} are evaluated.*\n")

    logger.info(f"Markdown report written to {path}")


def write_json(path: str, report: Report) -> None:
    """Write JSON report."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)

    logger.info(f"JSON report written to {path}")


def write_all_reports(output: str, report: Report, formats: List[str]) -> Dict[str, str]:
    """Write the HTML report plus any extra formats beside it."""
    html_path = Path(output)
    paths = {"html": str(html_path)}

    write_html(str(html_path), report)

    if "json" in formats:
        json_path = html_path.with_suffix(".json")
        write_json(str(json_path), report)
        paths["json"] = str(json_path)

    if "md" in formats:
        md_path = html_path.with_suffix(".md")
        write_markdown(str(md_path), report)
        paths["markdown"] = str(md_path)

    return paths
