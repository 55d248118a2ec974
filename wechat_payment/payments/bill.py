"""Download-bill report parsing.

The successful ``downloadbill`` response is CSV, not XML::

    交易时间,公众账号ID,商户号,...
    `2014-11-10 16:33:45,`wx2421b1c4370ec43b,`10000100,...
    总交易单数,总交易额,...
    `2,`0.02,...

Data cells carry a leading backtick so spreadsheets keep them as text.
The last two rows are the summary table.
"""

from wechat_payment.payments.schemas import BillReport

CELL_MARK = "`"
SUMMARY_ROWS = 2


def _clean_cell(cell: str) -> str:
    _, mark, value = cell.partition(CELL_MARK)
    return value if mark else cell.strip()


def _to_table(rows: list[str]) -> list[dict[str, str]]:
    if not rows:
        return []
    titles = [title.strip() for title in rows[0].split(",")]
    table = []
    for row in rows[1:]:
        cells = row.split(",")
        table.append({title: _clean_cell(cell) for title, cell in zip(titles, cells)})
    return table


def parse_bill(text: str) -> BillReport:
    """Split a bill report into record rows and the trailing summary."""
    rows = [row for row in text.strip().splitlines() if row.strip()]
    body, summary = rows[:-SUMMARY_ROWS], rows[-SUMMARY_ROWS:]
    summary_table = _to_table(summary)
    return BillReport(
        records=_to_table(body),
        summary=summary_table[0] if summary_table else {},
    )
