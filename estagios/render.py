"""
HTML rendering of a TableView.

Pure functions: they see only the TableView (ordered rows, headers, sort
state, stats), never the controller. The markup is built as a BeautifulSoup
tree so every cell value is escaped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Tag

from estagios.model import ASC, TableView, is_blank

WIDE_COLUMN = "atividades-previstas"
NO_RESULTS = "No records found for the selected filters."
PRINT_TITLE = "Relatório de Estágios"


def cell_text(value: Any) -> str:
    return "" if is_blank(value) else str(value)


def _stats_block(soup: BeautifulSoup, view: TableView) -> Tag:
    stats = view.stats
    div = soup.new_tag("div", attrs={"class": "stats"})
    for cls, text in (
        ("stats-total", f"Records found: {stats.total}"),
        ("stats-completos", f"Completed: {stats.completed}"),
        ("stats-pendentes", f"Pending: {stats.pending}"),
    ):
        span = soup.new_tag("span", attrs={"class": cls})
        span.string = text
        div.append(span)
    return div


def _table(soup: BeautifulSoup, view: TableView, actions: bool) -> Tag:
    wrapper = soup.new_tag("div", attrs={"class": "table-responsive"})
    table = soup.new_tag("table", attrs={"class": "table table-striped table-bordered table-sm"})
    wrapper.append(table)

    thead = soup.new_tag("thead", attrs={"class": "thead-light"})
    head_row = soup.new_tag("tr")
    for h in view.headers:
        classes = ["sortable"]
        if view.sort_state.column == h:
            classes.append("sort-asc" if view.sort_state.direction == ASC else "sort-desc")
        th = soup.new_tag("th", attrs={"class": " ".join(classes), "data-column": h})
        th.string = h
        head_row.append(th)
    if actions:
        th = soup.new_tag("th")
        th.string = "Ações"
        head_row.append(th)
    thead.append(head_row)
    table.append(thead)

    tbody = soup.new_tag("tbody")
    for record in view.rows:
        tr = soup.new_tag("tr", attrs={"data-id": record.record_id})
        for h in view.headers:
            td = soup.new_tag("td", attrs={"class": "wide-column"} if h == WIDE_COLUMN else {})
            td.string = cell_text(record.get(h))
            tr.append(td)
        if actions:
            td = soup.new_tag("td")
            button = soup.new_tag(
                "button", attrs={"class": "btn btn-info btn-sm grades-button", "data-id": record.record_id}
            )
            button.string = "Notas"
            td.append(button)
            tr.append(td)
        tbody.append(tr)
    table.append(tbody)

    return wrapper


def render(view: TableView, actions: bool = True) -> str:
    """
    Markup for the results area: stats (if any) plus the table, or a
    "no results" message when the view is empty.
    """
    soup = BeautifulSoup("", "html.parser")

    if view.stats is not None:
        soup.append(_stats_block(soup, view))

    if view.is_empty:
        p = soup.new_tag("p", attrs={"class": "no-results"})
        p.string = NO_RESULTS
        soup.append(p)
    else:
        soup.append(_table(soup, view, actions))

    return str(soup)


def render_print_view(view: TableView, title: str = PRINT_TITLE) -> str:
    """
    Standalone HTML document for printing. No action column.
    """
    soup = BeautifulSoup("<!DOCTYPE html><html><head></head><body></body></html>", "html.parser")

    meta = soup.new_tag("meta", attrs={"charset": "utf-8"})
    soup.head.append(meta)
    title_tag = soup.new_tag("title")
    title_tag.string = title
    soup.head.append(title_tag)
    style = soup.new_tag("style")
    style.string = (
        "body{font-family:sans-serif;font-size:10px}"
        "table{border-collapse:collapse;width:100%}"
        "th,td{border:1px solid #999;padding:2px 4px}"
        ".wide-column{min-width:300px}"
        "@media print{@page{size:landscape}}"
    )
    soup.head.append(style)

    h1 = soup.new_tag("h1")
    h1.string = title
    soup.body.append(h1)
    fragment = BeautifulSoup(render(view, actions=False), "html.parser")
    for node in list(fragment.contents):
        soup.body.append(node.extract())

    return str(soup)


def write_print_view(view: TableView, out_path: str | Path) -> int:
    """
    Write the print view to a file. Returns number of rows written.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render_print_view(view), encoding="utf-8")
    return len(view.rows)
