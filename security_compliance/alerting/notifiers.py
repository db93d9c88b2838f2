"""
Slack notification for the compliance summary.
"""

import os
import requests
from typing import Dict, Any, List, Optional
import logging

from ..models import Report
from .thresholds import find_unknown_checks, format_summary_line

logger = logging.getLogger(__name__)


def slack_escape(s: str) -> str:
    """Escape Slack link primitives and break @mentions."""
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("\n", " ")
        .replace("\r", " ")
        .replace("@", "@\u200b")  # zero-width space breaks mentions
    )


def send_slack(webhook_url: str, text: str, blocks: Optional[List] = None, timeout: int = 15) -> bool:
    """Post a message to a Slack incoming webhook. Returns False on any HTTP failure."""
    payload: Dict[str, Any] = {"text": text}
    if blocks:
        payload["blocks"] = blocks

    try:
        response = requests.post(webhook_url, json=payload, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Slack webhook rejected compliance summary: {e}")
        return False

    logger.info(f"Compliance summary posted to Slack ({len(payload.get('blocks', []))} blocks)")
    return True


def format_slack_compliance_report(report: Report, max_repos: int = 10) -> Dict[str, Any]:
    """Format the compliance summary for Slack with blocks."""
    summary = report.compliance_summary

    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": "🔒 Security Compliance Report",
                "emoji": True
            }
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Repositories:*\n{report.total_repos}"},
                {"type": "mrkdwn", "text": f"*Compliant:*\n{summary.compliant}"},
                {"type": "mrkdwn", "text": f"*Partial:*\n{summary.partial}"},
                {"type": "mrkdwn", "text": f"*Non-Compliant:*\n{summary.non_compliant}"},
            ]
        },
    ]

    # Lowest scores first
    worst = sorted(report.repos, key=lambda r: r.compliance.score)[:max_repos]
    if worst:
        lines = [
            f"• {slack_escape(r.full_name)}: {r.compliance.score:.0f}% ({r.compliance.status.value})"
            for r in worst
        ]
        if len(report.repos) > max_repos:
            lines.append(f"… and {len(report.repos) - max_repos} more")
        blocks.append({"type": "divider"})
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": "\n".join(lines)}
        })

    unknown = find_unknown_checks(report)
    blocks.append({
        "type": "context",
        "elements": [
            {
                "type": "mrkdwn",
                "text": f"Generated at {slack_escape(report.timestamp)} | {len(unknown)} check(s) could not be determined"
            }
        ]
    })

    return {
        "text": format_summary_line(summary),
        "blocks": blocks
    }


def send_compliance_report_to_slack(report: Report) -> bool:
    """Send formatted compliance report to Slack."""

    webhook_url = os.environ.get("SLACK_WEBHOOK_URL")
    if not webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not set, skipping Slack notification")
        return False

    formatted = format_slack_compliance_report(report)

    return send_slack(
        webhook_url,
        formatted["text"],
        formatted["blocks"]
    )
