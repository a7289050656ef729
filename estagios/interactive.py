from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from estagios.api import ApiClient
from estagios.config import EXPORT_FILENAME, PRINT_FILENAME
from estagios.controller import ResultSetController
from estagios.errors import AuthError, EstagiosError, PermissionDeniedError
from estagios.export_xlsx import export_rows_to_xlsx
from estagios.grades import ACCESS_DENIED, OVERWRITE_QUESTION, GradeEditSession, is_advisor
from estagios.model import ASC, COMPACT_HEADERS, DISPLAY_HEADERS, FilterCriteria, TableView, UserIdentity
from estagios.render import cell_text, write_print_view
from estagios.session import SessionStore

console = Console()

ALERT_STYLES = {"danger": "bold red", "success": "bold green", "warning": "yellow", "info": "cyan"}


def _println(msg: str = "") -> None:
    console.print(msg)


def _alert(message: str, kind: str = "info") -> None:
    style = ALERT_STYLES.get(kind, "")
    text = escape(message)
    console.print(f"[{style}]{text}[/]" if style else text)


async def _prompt(msg: str) -> str:
    return await asyncio.to_thread(console.input, msg, markup=False)


def run_interactive(store: SessionStore) -> int:
    """
    Interactive menu loop. Returns a process exit code.
    """
    session = store.load()
    if session is None:
        _println("Not logged in. Run: estagios login --token <token> --name <your name>")
        return 2
    return asyncio.run(_main_loop(store, session.user))


async def _main_loop(store: SessionStore, user: UserIdentity) -> int:
    client = ApiClient(store)
    controller = ResultSetController(client)

    try:
        with console.status("Loading..."):
            # filter options first, then the initial search
            await controller.start()
    except AuthError as exc:
        _alert(exc.message, "danger")
        _println("Please log in again.")
        return 2
    except EstagiosError as exc:
        _alert(exc.message, "danger")

    while True:
        _print_header(controller, user)
        _print_table(controller.view())

        choice = (
            await _prompt(
                "\n[1] Search with filters\n"
                "[2] Clear filters\n"
                "[3] Sort by column\n"
                "[4] Enter grades\n"
                "[5] Export spreadsheet (.xlsx)\n"
                "[6] Print view (.html)\n"
                "[9] Logout\n"
                "[0] Exit\n"
                "Select: "
            )
        ).strip()

        if choice == "0":
            _println("Bye.")
            return 0
        if choice == "9":
            store.clear()
            _println("Logged out.")
            return 0

        try:
            if choice == "1":
                await _flow_search(controller)
            elif choice == "2":
                with console.status("Loading..."):
                    await controller.search(FilterCriteria())
            elif choice == "3":
                await _flow_sort(controller)
            elif choice == "4":
                await _flow_grades(controller, client, user)
            elif choice == "5":
                await _flow_export(controller.view())
            elif choice == "6":
                await _flow_print(controller.view())
            else:
                _println("Invalid choice.")
        except AuthError as exc:
            _alert(exc.message, "danger")
            _println("Please log in again.")
            return 2
        except EstagiosError as exc:
            _alert(exc.message, "danger")


def _print_header(controller: ResultSetController, user: UserIdentity) -> None:
    _println("\n=== Estágios (interactive) ===")
    _println(f"User: [bold]{escape(user.name)}[/]")

    filters = controller.last_criteria.to_payload()
    if filters:
        _println("Filters: " + " | ".join(escape(f"{k}={v}") for k, v in filters.items()))
    else:
        _println("Filters: (none)")

    stats = controller.stats
    if stats is not None:
        _println(
            f"Records found: [yellow]{stats.total}[/] | "
            f"Completed: [green]{stats.completed}[/] | Pending: [red]{stats.pending}[/]"
        )


def _print_table(view: TableView) -> None:
    if view.is_empty:
        _alert("No records found for the selected filters.", "warning")
        return

    table = Table(box=box.SIMPLE)
    table.add_column("#", justify="right")
    for h in COMPACT_HEADERS:
        label = h
        if view.sort_state.column == h:
            label += " ▲" if view.sort_state.direction == ASC else " ▼"
        table.add_column(label)

    for i, record in enumerate(view.rows, start=1):
        table.add_row(str(i), *[escape(cell_text(record.get(h))) for h in COMPACT_HEADERS])

    console.print(table)

    column = view.sort_state.column
    if column and column not in COMPACT_HEADERS:
        arrow = "▲" if view.sort_state.direction == ASC else "▼"
        _println(f"Sorted by: {column} {arrow}")


async def _pick(label: str, options: list[str]) -> Optional[str]:
    """
    Ask for one filter value. Accepts a number from `options` or free text.
    Blank means no constraint.
    """
    if options:
        _println(f"\n{label}:")
        for i, opt in enumerate(options, start=1):
            _println(f"  {i}) {escape(opt)}")

    raw = (await _prompt(f"{label} [blank = any]: ")).strip()
    if not raw:
        return None
    if options and raw.isdigit() and 1 <= int(raw) <= len(options):
        return options[int(raw) - 1]
    return raw


async def _flow_search(controller: ResultSetController) -> None:
    options = controller.filter_options
    criteria = FilterCriteria(
        status=await _pick("Status", options.status if options else []),
        course=await _pick("Course", options.courses if options else []),
        advisor=await _pick("Advisor", options.advisors if options else []),
        cohort=await _pick("Cohort", options.cohorts if options else []),
        year=await _pick("Year", options.years if options else []),
        name=await _pick("Student name", []),
        cpf=await _pick("CPF", []),
        company=await _pick("Company", []),
    )

    with console.status("Loading..."):
        await controller.search(criteria)


async def _flow_sort(controller: ResultSetController) -> None:
    if not controller.canonical:
        _println("Nothing to sort.")
        return

    table = Table(title="Sort by", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Column")
    for i, h in enumerate(DISPLAY_HEADERS, start=1):
        table.add_row(str(i), h)
    console.print(table)

    pick = (await _prompt("Column number [blank = back]: ")).strip()
    if not pick:
        return
    if not pick.isdigit():
        _println("Not a number.")
        return

    idx = int(pick)
    if not (1 <= idx <= len(DISPLAY_HEADERS)):
        _println("Out of range.")
        return

    controller.sort_by(DISPLAY_HEADERS[idx - 1])


async def _ask_yes_no(question: str) -> bool:
    answer = (await _prompt(f"{question} [y/N]: ")).strip().lower()
    return answer in ("y", "yes", "s", "sim")


async def _flow_grades(controller: ResultSetController, client: ApiClient, user: UserIdentity) -> None:
    view = controller.view()
    if view.is_empty:
        _println("No records.")
        return

    pick = (await _prompt("Row number [blank = back]: ")).strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(view.rows)):
        _println("Out of range.")
        return

    record = view.rows[int(pick) - 1]
    if not is_advisor(record, user):
        raise PermissionDeniedError(ACCESS_DENIED)

    # the prompt is async, so ask before open() and hand it the answer
    confirmed = True
    if record.has_grades:
        confirmed = await _ask_yes_no(OVERWRITE_QUESTION)

    session = GradeEditSession(client)
    draft = session.open(record, user, confirm=lambda _q: confirmed)
    if draft is None:
        return

    _println(f"\nGrades - [bold]{escape(cell_text(record.full_name))}[/]")
    for attr, label in (
        ("supervisor_grade", "Supervisor grade"),
        ("report_grade", "Report grade"),
        ("defense_grade", "Defense grade"),
        ("notes", "Notes"),
    ):
        current = cell_text(getattr(draft, attr))
        raw = (await _prompt(f"{label} [{current}]: ")).strip()
        if raw:
            session.update_draft(**{attr: raw})

    while True:
        try:
            with console.status("Saving..."):
                message = await session.submit()
        except AuthError:
            raise
        except EstagiosError as exc:
            _alert(exc.message, "danger")
            if await _ask_yes_no("Retry?"):
                continue
            session.cancel()
            return
        break

    _alert(message, "success")
    with console.status("Loading..."):
        await controller.refresh()


def _output_path(default_name: str, suffix: str, entered: str) -> Path:
    downloads = Path.home() / "Downloads"
    out_path = downloads / entered if entered else downloads / default_name
    if out_path.suffix.lower() != suffix:
        out_path = out_path.with_suffix(suffix)
    return out_path


async def _flow_export(view: TableView) -> None:
    if view.is_empty:
        _alert("No data in the table to export.", "warning")
        return

    entered = (await _prompt(f"File name, default is [{EXPORT_FILENAME}]: ")).strip()
    out_path = _output_path(EXPORT_FILENAME, ".xlsx", entered)

    try:
        n = export_rows_to_xlsx(view, out_path)
    except OSError as exc:
        _alert(f"Could not write {out_path}: {exc}", "danger")
        return
    _alert(f"Exported {n} records to: {out_path.resolve()}", "success")


async def _flow_print(view: TableView) -> None:
    if view.is_empty:
        _alert("No data in the table to print.", "warning")
        return

    entered = (await _prompt(f"File name, default is [{PRINT_FILENAME}]: ")).strip()
    out_path = _output_path(PRINT_FILENAME, ".html", entered)

    try:
        n = write_print_view(view, out_path)
    except OSError as exc:
        _alert(f"Could not write {out_path}: {exc}", "danger")
        return
    _alert(f"Print view with {n} records written to: {out_path.resolve()}", "success")
    _println("Open it in a browser and print (landscape).")
