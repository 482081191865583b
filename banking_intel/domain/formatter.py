"""Report formatter - renders the canonical envelope as json, html or pdf-pending"""

import html
import logging
from typing import Any, Dict, Iterable, Optional, Union

from banking_intel.domain.models import Report, ReportFormat, SectionKind
from banking_intel.domain.prompts import money

AVAILABLE_FORMATS = tuple(f.value for f in ReportFormat)

HTML_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 1200px; margin: 0 auto; padding: 20px; }
.header { text-align: center; border-bottom: 3px solid #2c3e50; padding-bottom: 20px; margin-bottom: 30px; }
.title { font-size: 28px; font-weight: bold; color: #2c3e50; margin-bottom: 10px; }
.period { font-size: 16px; color: #7f8c8d; }
.section { margin-bottom: 40px; page-break-inside: avoid; }
.section-title { font-size: 20px; font-weight: bold; color: #2c3e50; border-left: 4px solid #3498db; padding-left: 15px; margin-bottom: 15px; }
.section-content { background-color: #f8f9fa; padding: 20px; border-radius: 5px; border-left: 4px solid #e9ecef; }
.fallback-note { font-size: 12px; color: #95a5a6; margin-top: 8px; }
.metrics-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; margin: 20px 0; }
.metric-card { background: white; padding: 15px; border-radius: 5px; border: 1px solid #dee2e6; text-align: center; }
.metric-value { font-size: 24px; font-weight: bold; color: #2c3e50; }
.metric-label { font-size: 14px; color: #6c757d; margin-top: 5px; }
table { width: 100%; border-collapse: collapse; margin: 15px 0; }
th, td { padding: 8px 12px; text-align: left; border-bottom: 1px solid #dee2e6; }
th { background-color: #f8f9fa; font-weight: bold; }
.summary { background-color: #e8f4fd; padding: 20px; border-radius: 5px; margin-top: 30px; }
"""


def resolve_format(fmt: Union[str, ReportFormat, None]) -> ReportFormat:
    """Map a requested format to a known one; anything unrecognized is JSON"""
    if isinstance(fmt, ReportFormat):
        return fmt
    try:
        return ReportFormat((fmt or ReportFormat.JSON.value).lower())
    except ValueError:
        logging.warning(f"Unknown report format {fmt!r}, falling back to json", extra={"step": "format_fallback"})
        return ReportFormat.JSON


def format_report(report: Report, fmt: Union[str, ReportFormat, None] = None) -> Dict[str, Any]:
    """
    Render the report in the requested format.

    json returns the canonical envelope. html adds an `html_content` document.
    pdf returns the envelope flagged `is_pdf_pending` for an external renderer.
    """
    target = resolve_format(fmt if fmt is not None else report.format)
    envelope = report.to_dict()
    envelope["format"] = target.value

    if target is ReportFormat.HTML:
        envelope["html_content"] = render_html(report)
    elif target is ReportFormat.PDF:
        envelope["is_pdf_pending"] = True

    return envelope


def _text(value: Any) -> str:
    """Escape text and keep line breaks"""
    return html.escape(str(value)).replace("\n", "<br>")


def _metric_card(value: str, label: str) -> str:
    return (
        '<div class="metric-card">'
        f'<div class="metric-value">{html.escape(value)}</div>'
        f'<div class="metric-label">{html.escape(label)}</div>'
        "</div>"
    )


def _metrics_grid(metrics: Optional[Dict[str, Any]]) -> str:
    if not metrics:
        return ""
    cards = [
        _metric_card(money(metrics.get("total_balance", 0.0)), "Total Balance"),
        _metric_card(money(metrics.get("income", 0.0)), "Income"),
        _metric_card(money(metrics.get("expenses", 0.0)), "Expenses"),
        _metric_card(money(metrics.get("net_change", 0.0)), "Net Change"),
    ]
    return f'<div class="metrics-grid">{"".join(cards)}</div>'


def _table(headers: Iterable[str], rows: Iterable[Iterable[Any]]) -> str:
    head = "".join(f"<th>{html.escape(h)}</th>" for h in headers)
    body = "".join("<tr>" + "".join(f"<td>{_text(cell)}</td>" for cell in row) + "</tr>" for row in rows)
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def _section_extras(section_id: str, data: Dict[str, Any]) -> str:
    if section_id == SectionKind.ACCOUNT_SUMMARY.value:
        return _metrics_grid(data.get("metrics"))

    if section_id == SectionKind.BEHAVIOR.value and data.get("categories"):
        return _table(
            ("Category", "Count", "Percentage", "Elasticity"),
            (
                (c["name"], c["count"], f"{c['percent_of_total']:.1f}%", c["elasticity"])
                for c in data["categories"][:10]
            ),
        )

    if section_id == SectionKind.MERCHANTS.value and data.get("merchants"):
        return _table(
            ("Merchant", "Transactions", "Total Amount"),
            ((m["name"], m["count"], money(m["total"])) for m in data["merchants"][:10]),
        )

    return ""


def _summary_card(summary: Dict[str, Any]) -> str:
    return (
        '<div class="summary"><h3>Report Summary</h3>'
        f"<p><strong>Total Balance:</strong> {html.escape(money(summary.get('total_balance', 0.0)))}</p>"
        f"<p><strong>Transactions Analyzed:</strong> {int(summary.get('transaction_count', 0))}</p>"
        f"<p><strong>Risk Factors:</strong> {int(summary.get('risk_count', 0))}</p>"
        "</div>"
    )


def render_html(report: Report) -> str:
    """Self-contained HTML document; every piece of text is escaped"""
    sections = []
    for section in report.sections:
        note = '<div class="fallback-note">Generated from local signals.</div>' if section.used_fallback else ""
        sections.append(
            f'<div class="section" id="{html.escape(section.id)}">'
            f'<div class="section-title">{html.escape(section.title)}</div>'
            f'<div class="section-content">{_text(section.content)}{_section_extras(section.id, section.data)}</div>'
            f"{note}</div>"
        )

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="UTF-8">\n'
        f"<title>{html.escape(report.title)}</title>\n"
        f"<style>{HTML_STYLE}</style>\n</head>\n<body>\n"
        f'<div class="header"><div class="title">{html.escape(report.title)}</div>'
        f'<div class="period">Generated: {html.escape(report.generated.strftime("%m/%d/%Y"))}'
        f" | Period: {html.escape(report.period)}</div></div>\n"
        + "\n".join(sections)
        + "\n"
        + _summary_card(report.summary)
        + "\n</body>\n</html>\n"
    )
