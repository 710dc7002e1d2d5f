"""Tests for receipt text formatting, preview markup and payload encoding."""
from datetime import datetime

import pytest

from tillprint.models.report import NightlyReport
from tillprint.services.receipt_service import (
    encode_payload,
    format_currency,
    format_for_print_preview,
    format_receipt_content,
    render_preview_document,
)

PRINTED_AT = datetime(2026, 10, 17, 23, 5, 9)
RULE = "=" * 32

EXPECTED_RECEIPT = f"""NIGHTLY SALES REPORT
Sat, Oct 17, 2026
11:05:09 PM

{RULE}

SUMMARY
Total Sales: $1,234.50
Total Orders: 42
Average Order: $29.39

{RULE}

PAYMENT BREAKDOWN
Cash Sales: $434.50
Card Sales: $800.00
Credit Card Fees (5%): $40.00

{RULE}

DEPARTMENT BREAKDOWN
Box Office: $900.00
Orders: 30
Candy Counter: $300.00
Orders: 10
After Closing: $34.50
Orders: 2

{RULE}

STAFF PERFORMANCE
Dana: $1,000.00 (35 orders)
Sam: $234.50 (7 orders)

{RULE}

Generated by: Dana (manager)
10/17/2026, 11:05:09 PM

Thank you!"""


def test_full_receipt_layout(sample_report):
    text = format_receipt_content(sample_report, "Dana", "manager",
                                  generated_at=PRINTED_AT, fee_percent=5)
    assert text == EXPECTED_RECEIPT


def test_formatting_is_pure(sample_report):
    first = format_receipt_content(sample_report, "Dana", "manager", generated_at=PRINTED_AT)
    second = format_receipt_content(sample_report, "Dana", "manager", generated_at=PRINTED_AT)
    assert first == second


def test_fee_line_without_rate(sample_report):
    text = format_receipt_content(sample_report, "Dana", "manager", generated_at=PRINTED_AT)
    assert "Credit Card Fees: $40.00" in text.splitlines()


def test_sections_separated_by_rule(sample_report):
    text = format_receipt_content(sample_report, "Sam", "usher", generated_at=PRINTED_AT)
    sections = text.split(f"\n\n{RULE}\n\n")

    assert [s.splitlines()[0] for s in sections] == [
        "NIGHTLY SALES REPORT",
        "SUMMARY",
        "PAYMENT BREAKDOWN",
        "DEPARTMENT BREAKDOWN",
        "STAFF PERFORMANCE",
        "Generated by: Sam (usher)",
    ]
    assert text == text.strip()


def test_morning_clock_time(sample_report):
    text = format_receipt_content(sample_report, "Dana", "manager",
                                  generated_at=datetime(2026, 10, 17, 0, 7, 3))
    lines = text.splitlines()
    assert lines[2] == "12:07:03 AM"
    assert "10/17/2026, 12:07:03 AM" in lines


def test_empty_report_has_zero_average():
    report = NightlyReport(date="2026-10-17")
    text = format_receipt_content(report, "Dana", "manager", generated_at=PRINTED_AT)
    lines = text.splitlines()

    assert "Average Order: $0.00" in lines
    assert "Box Office: $0.00" in lines
    assert lines[lines.index("STAFF PERFORMANCE") + 1] == ""


def test_unparseable_date_is_printed_verbatim():
    report = NightlyReport(date="closing night")
    text = format_receipt_content(report, "Dana", "manager", generated_at=PRINTED_AT)
    assert text.splitlines()[1] == "closing night"


@pytest.mark.parametrize("amount, expected", [
    (0, "$0.00"),
    (5, "$5.00"),
    (1234.5, "$1,234.50"),
    (1000000, "$1,000,000.00"),
    (-12.3, "-$12.30"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_preview_marks_title_and_headers():
    markup = format_for_print_preview("NIGHTLY SALES REPORT\nSUMMARY\nTotal Orders: 42")
    assert markup == (
        '<div class="center bold">NIGHTLY SALES REPORT</div><br>'
        '<div class="bold">SUMMARY</div><div class="line"></div><br>'
        'Total Orders: 42'
    )


def test_preview_bolds_amounts_and_ranked_lines():
    markup = format_for_print_preview("Total Sales: $1,234.50\n1. Popcorn - 12 sold")
    assert markup == (
        'Total Sales: <span class="bold">$1,234.50</span><br>'
        '<span class="bold">1. Popcorn - 12 sold</span>'
    )


def test_preview_bolds_negative_amounts():
    markup = format_for_print_preview("Refunds: -$12.30")
    assert markup == 'Refunds: <span class="bold">-$12.30</span>'


def test_preview_escapes_html():
    markup = format_for_print_preview("Generated by: <script>x</script> & co")
    assert "<script>" not in markup
    assert "&lt;script&gt;x&lt;/script&gt; &amp; co" in markup


def test_preview_document_wraps_markup(sample_report):
    text = format_receipt_content(sample_report, "Dana", "manager", generated_at=PRINTED_AT)
    document = render_preview_document(text)

    assert document.startswith("<html>")
    assert "font-family: 'Courier New', monospace;" in document
    assert "width: 58mm;" in document
    assert 'Box Office: <span class="bold">$900.00</span>' in document


def test_encode_payload_appends_feed():
    assert encode_payload("A\r\nB\rC") == b"A\nB\nC\n\n\n\n\n"


def test_encode_payload_keeps_existing_newline():
    assert encode_payload("done\n", feed_lines=0) == b"done\n"


def test_encode_payload_replaces_unencodable():
    assert encode_payload("Café", encoding="ascii", feed_lines=0) == b"Caf?\n"
