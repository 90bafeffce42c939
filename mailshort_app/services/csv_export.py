"""
CSV export of a link's clicks.

Columns are ts, referer, ua. Fields containing a comma, a double quote or a
line break are quoted with inner quotes doubled (csv.QUOTE_MINIMAL).
"""

import csv
import io
from typing import Iterable

from mailshort_app.models.click import ClickEvent

CSV_HEADER = ("ts", "referer", "ua")


def export_filename(code: str) -> str:
    return f"link_{code}_clicks.csv"


def clicks_to_csv(clicks: Iterable[ClickEvent]) -> str:
    """Render *clicks* (already ordered by ts ascending) as CSV text"""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for click in clicks:
        writer.writerow([
            click.ts.isoformat() if click.ts else "",
            click.referer or "",
            click.user_agent or "",
        ])
    return output.getvalue()
