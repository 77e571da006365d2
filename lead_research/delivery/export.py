"""Export and report formatting for pipeline results."""

import csv
import html
import io
import json
from pathlib import Path
from typing import Iterable

from lead_research.models import Company

DEGRADED_BANNER = (
    "DEGRADED MODE: some results come from built-in demo data or template "
    "messages because the language model was unavailable."
)

CSV_HEADER = [
    "Rank",
    "Company",
    "Score",
    "Round",
    "Amount",
    "Sector",
    "HQ",
    "Domain",
    "Headcount",
    "Snippet",
    "Outreach Message",
    "Demo Data",
    "Template Outreach",
]


def to_json(companies: Iterable[Company]) -> str:
    """Serialize results with their wire keys."""
    return json.dumps(
        [c.to_export() for c in companies],
        indent=2,
        ensure_ascii=False,
    )


def export_to_json(companies: list[Company], output_path: Path) -> str:
    """Write results to a JSON file and return the JSON text."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    text = to_json(companies)
    output_path.write_text(text, encoding="utf-8")
    return text


def write_csv(companies: Iterable[Company], f):
    """Write results as CSV to an open text stream."""
    writer = csv.writer(f)

    # Header
    writer.writerow(CSV_HEADER)

    # Data rows
    for rank, c in enumerate(companies, 1):
        writer.writerow([
            rank,
            c.name,
            f"{c.icp_score:.2f}",
            c.round,
            c.amount,
            c.sector,
            c.headquarters,
            c.domain or "",
            c.headcount if c.headcount is not None else "",
            c.snippet,
            c.outreach_message,
            "Yes" if c.demo_data else "No",
            "Yes" if c.outreach_fallback else "No",
        ])


def export_to_csv(companies: list[Company], output_path: Path):
    """Export results to CSV file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        write_csv(companies, f)


def to_csv(companies: Iterable[Company]) -> str:
    output = io.StringIO()
    write_csv(companies, output)
    return output.getvalue()


def render_html_report(companies: list[Company], degraded: bool = False) -> str:
    """Render results as the HTML body of a results email."""
    esc = html.escape
    parts = ["<h2>Lead Research Agent Results</h2>"]

    if degraded or any(c.demo_data or c.outreach_fallback for c in companies):
        parts.append(f'<p style="color:#b00"><strong>{esc(DEGRADED_BANNER)}</strong></p>')

    if not companies:
        parts.append("<p>No companies matched the ICP.</p>")
        return "\n".join(parts)

    parts.append("<ul>")
    for c in companies:
        parts.append("<li>")
        parts.append(f"<strong>{esc(c.name)}</strong> ({esc(c.sector)}, {esc(c.headquarters)})<br>")
        parts.append(f"<b>ICP score:</b> {c.icp_score:.2f}<br>")
        parts.append(f"<b>Funding:</b> {esc(c.round)} {esc(c.amount)}<br>")
        if c.domain:
            parts.append(f"<b>Domain:</b> {esc(c.domain)}<br>")
        if c.headcount is not None:
            parts.append(f"<b>Employees:</b> {c.headcount}<br>")
        parts.append(f"<b>Summary:</b> {esc(c.snippet)}<br>")
        message = esc(c.outreach_message).replace("\n", "<br>")
        parts.append(f"<b>Outreach:</b> {message}")
        if c.outreach_fallback:
            parts.append(" <em>(template)</em>")
        parts.append("</li>")
    parts.append("</ul>")

    return "\n".join(parts)


def print_summary(companies: list[Company], degraded: bool = False):
    """Print a summary of results to console."""
    print("\n" + "=" * 80)
    print("LEAD RESEARCH AGENT - RESULTS")
    print("=" * 80)

    if degraded:
        print(f"\n{DEGRADED_BANNER}")

    if not companies:
        print("\nNo companies found that match your ICP criteria.")
        print("\n" + "=" * 80)
        return

    for i, c in enumerate(companies, 1):
        print(f"\n#{i} - {c.name} (Score: {c.icp_score:.2f})")
        print("-" * 50)
        print(f"Sector: {c.sector}")
        print(f"Round: {c.round} | Amount: {c.amount}")
        print(f"HQ: {c.headquarters}")
        if c.domain:
            print(f"Domain: {c.domain}")
        if c.headcount is not None:
            print(f"Employees: {c.headcount}")
        print(f"Snippet: {c.snippet}")
        print("\nOutreach Message:")
        for line in c.outreach_message.splitlines():
            print(f"   {line}")

    print("\n" + "=" * 80)
