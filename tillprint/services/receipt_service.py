"""
Receipt encoder.

Formats the nightly sales report as fixed-width receipt text, marks that
text up for the print preview and turns it into printer bytes. Every
function here is pure.
"""
import html
import re
from datetime import date, datetime
from typing import List, Optional, Pattern, Tuple

from tillprint.constants import ReceiptConstants
from tillprint.models.report import NightlyReport

DEPARTMENT_LABELS: Tuple[Tuple[str, str], ...] = (
    ("box_office", "Box Office"),
    ("candy_counter", "Candy Counter"),
    ("after_closing", "After Closing"),
)

PREVIEW_RULES: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r"^NIGHTLY SALES REPORT$", re.MULTILINE),
     r'<div class="center bold">NIGHTLY SALES REPORT</div>'),
    (re.compile(r"^(SUMMARY|PAYMENT BREAKDOWN|DEPARTMENT BREAKDOWN|STAFF PERFORMANCE|TOP PRODUCTS)$", re.MULTILINE),
     r'<div class="bold">\1</div><div class="line"></div>'),
    (re.compile(r"^(.+): (-?)\$([0-9,]+\.[0-9]{2})$", re.MULTILINE),
     r'\1: <span class="bold">\2$\3</span>'),
    (re.compile(r"^([0-9]+\. .+)$", re.MULTILINE),
     r'<span class="bold">\1</span>'),
    (re.compile(r"\n"), "<br>"),
)
"""Ordered (pattern, replacement) pairs applied by format_for_print_preview"""

PREVIEW_DOCUMENT = """<html>
  <head>
    <title>Receipt Print</title>
    <style>
      body {{
        font-family: 'Courier New', monospace;
        font-size: 12px;
        line-height: 1.2;
        margin: 0;
        padding: 10px;
        width: 58mm;
        background: white;
      }}
      .receipt {{ white-space: pre-line; }}
      .center {{ text-align: center; }}
      .bold {{ font-weight: bold; }}
      .line {{ border-bottom: 1px dashed #000; margin: 5px 0; }}
      @media print {{
        body {{ margin: 0; padding: 5px; }}
      }}
    </style>
  </head>
  <body>
    <div class="receipt">{markup}</div>
  </body>
</html>
"""


def format_currency(amount: float) -> str:
    """``1234.5`` -> ``$1,234.50``."""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def _clock_time(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"


def _report_date(value: str) -> str:
    try:
        parsed = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{parsed:%a}, {parsed:%b} {parsed.day}, {parsed.year}"


def format_receipt_content(
    report: NightlyReport,
    user_name: str,
    user_role: str,
    *,
    generated_at: Optional[datetime] = None,
    fee_percent: Optional[float] = None,
) -> str:
    """
    Format a nightly report as receipt text.

    Sections, separated by a 32 character rule: header, summary, payment
    breakdown, department breakdown, staff performance, footer.

    Args:
        report: Report computed by the reporting module
        user_name: Staff member printing the report
        user_role: Their role, shown in the footer
        generated_at: Print moment (default now); pass it for reproducible output
        fee_percent: Card fee rate shown next to the fee line, if known

    Returns:
        Receipt text without trailing whitespace

    Example:
        >>> text = format_receipt_content(report, "Dana", "manager",
        ...                               generated_at=datetime(2026, 10, 17, 23, 5))
        >>> text.splitlines()[0]
        'NIGHTLY SALES REPORT'
    """
    moment = generated_at or datetime.now()
    rule = ReceiptConstants.SECTION_RULE

    fee_label = "Credit Card Fees"
    if fee_percent is not None:
        fee_label = f"Credit Card Fees ({fee_percent:g}%)"

    departments: List[str] = []
    for attr, label in DEPARTMENT_LABELS:
        bucket = getattr(report.department_breakdown, attr)
        departments.append(f"{label}: {format_currency(bucket.sales)}")
        departments.append(f"Orders: {bucket.orders}")

    staff = [
        f"{user.user_name}: {format_currency(user.sales)} ({user.orders} orders)"
        for user in report.user_breakdown
    ]

    sections = [
        [
            "NIGHTLY SALES REPORT",
            _report_date(report.date),
            _clock_time(moment),
        ],
        [
            "SUMMARY",
            f"Total Sales: {format_currency(report.total_sales)}",
            f"Total Orders: {report.total_orders}",
            f"Average Order: {format_currency(report.average_order)}",
        ],
        [
            "PAYMENT BREAKDOWN",
            f"Cash Sales: {format_currency(report.cash_sales)}",
            f"Card Sales: {format_currency(report.card_sales)}",
            f"{fee_label}: {format_currency(report.credit_card_fees)}",
        ],
        ["DEPARTMENT BREAKDOWN"] + departments,
        ["STAFF PERFORMANCE"] + staff,
        [
            f"Generated by: {user_name} ({user_role})",
            f"{moment:%m/%d/%Y}, {_clock_time(moment)}",
            "",
            "Thank you!",
        ],
    ]

    separator = f"\n\n{rule}\n\n"
    return separator.join("\n".join(lines) for lines in sections).strip()


def format_for_print_preview(text: str) -> str:
    """Apply the preview rule table to receipt text. Returns HTML fragment markup."""
    marked = html.escape(text, quote=False)
    for pattern, replacement in PREVIEW_RULES:
        marked = pattern.sub(replacement, marked)
    return marked


def render_preview_document(text: str) -> str:
    """Full 58 mm receipt HTML page for the preview surface."""
    return PREVIEW_DOCUMENT.format(markup=format_for_print_preview(text))


def encode_payload(
    text: str,
    encoding: str = ReceiptConstants.DEFAULT_ENCODING,
    feed_lines: int = ReceiptConstants.FEED_LINES,
) -> bytes:
    """
    Encode receipt text for raw transmission.

    Line endings are normalized to ``\\n`` and ``feed_lines`` blank lines are
    appended so the last line clears the tear bar. Characters the codec
    cannot represent become its replacement character.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    if not normalized.endswith("\n"):
        normalized += "\n"
    normalized += "\n" * feed_lines
    return normalized.encode(encoding, errors="replace")
