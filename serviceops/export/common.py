from __future__ import annotations

import csv
import re
from decimal import Decimal
from io import StringIO


def render_csv(rows: list[list[str]]) -> str:
    """Write rows as CSV text.

    Fields containing commas, quotes or newlines are wrapped in double quotes
    with inner quotes doubled; everything else is written bare.
    """
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerows(rows)
    return output.getvalue()


def safe_filename_part(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


def fmt_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def fmt_quantity(quantity: Decimal) -> str:
    return format(quantity.normalize(), "f")


def fmt_percent(rate: Decimal) -> str:
    return f"{rate * 100:.2f}%"
