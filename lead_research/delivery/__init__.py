"""Result export and reporting."""

from .export import (
    export_to_csv,
    export_to_json,
    print_summary,
    render_html_report,
    to_csv,
    to_json,
)

__all__ = [
    "export_to_csv",
    "export_to_json",
    "print_summary",
    "render_html_report",
    "to_csv",
    "to_json",
]
