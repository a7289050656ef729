"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    estagios login --token <token> --name "Maria Souza"
    estagios search --course "Engenharia" --sort nome-completo
    estagios grades 42 --supervisor 8 --report 7 --defense 9 --notes ok
    estagios export out.xlsx --status Concluído
    estagios print out.html
    estagios interactive

Note:
- The interactive menu lives in estagios/interactive.py
- This CLI prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Callable, Coroutine

from estagios.api import ApiClient
from estagios.config import EXPORT_FILENAME, PRINT_FILENAME
from estagios.controller import ResultSetController
from estagios.errors import AuthError, EstagiosError
from estagios.export_xlsx import export_rows_to_xlsx
from estagios.grades import GradeEditSession
from estagios.model import COMPACT_HEADERS, FilterCriteria, StudentRecord
from estagios.render import cell_text, write_print_view
from estagios.session import SessionStore


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_AUTH = 2

NOT_LOGGED_IN = "Not logged in. Run: estagios login --token <token> --name <your name>"
SESSION_EXPIRED = "Session expired or not authorized. Please log in again."


def _criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        status=getattr(args, "status", None),
        course=getattr(args, "course", None),
        advisor=getattr(args, "advisor", None),
        cohort=getattr(args, "cohort", None),
        year=getattr(args, "year", None),
        name=getattr(args, "name", None),
        cpf=getattr(args, "cpf", None),
        company=getattr(args, "company", None),
    )


def _row_line(record: StudentRecord, headers: list[str]) -> str:
    return " | ".join(cell_text(record.get(h)) for h in headers)


def _ask_yes_no(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N]: ")
    except EOFError:
        # no terminal to answer from (stdin closed or piped)
        return False
    return answer.strip().lower() in ("y", "yes", "s", "sim")


def _run(store: SessionStore, flow: Callable[[], Coroutine[Any, Any, int]]) -> int:
    """
    Run one async command and turn client errors into exit codes.
    """
    if store.load() is None:
        print(NOT_LOGGED_IN)
        return EXIT_AUTH

    try:
        return asyncio.run(flow())
    except AuthError:
        print(SESSION_EXPIRED)
        return EXIT_AUTH
    except EstagiosError as exc:
        print(f"Error: {exc.message}")
        return EXIT_ERROR


async def _load_view(store: SessionStore, args: argparse.Namespace) -> ResultSetController:
    """
    Search with the filters from `args`, then apply each --sort in order.
    """
    controller = ResultSetController(ApiClient(store))
    await controller.search(_criteria_from_args(args))
    for column in getattr(args, "sort", None) or []:
        controller.sort_by(column)
    return controller


def _cmd_login(args: argparse.Namespace, store: SessionStore) -> int:
    token = (args.token or "").strip()
    name = (args.name or "").strip()
    if not token or not name:
        print("Please provide --token and --name.")
        return EXIT_ERROR

    store.save(token, {"nome": name})
    print(f"Logged in as: {name}")
    return EXIT_OK


def _cmd_logout(args: argparse.Namespace, store: SessionStore) -> int:
    store.clear()
    print("Logged out.")
    return EXIT_OK


def _cmd_options(args: argparse.Namespace, store: SessionStore) -> int:
    async def flow() -> int:
        options = await ApiClient(store).fetch_filter_options()
        for label, values in (
            ("Status", options.status),
            ("Courses", options.courses),
            ("Advisors", options.advisors),
            ("Cohorts", options.cohorts),
            ("Years", options.years),
        ):
            print(f"{label}: {', '.join(values) if values else '-'}")
        return EXIT_OK

    return _run(store, flow)


def _cmd_search(args: argparse.Namespace, store: SessionStore) -> int:
    """
    Print the matching records (compact columns) and the stats line.
    """

    async def flow() -> int:
        controller = await _load_view(store, args)
        view = controller.view()

        if view.is_empty:
            print("No results.")
            return EXIT_OK

        print(" | ".join(COMPACT_HEADERS))
        for record in view.rows:
            print(_row_line(record, COMPACT_HEADERS))

        if view.stats is not None:
            s = view.stats
            print(f"Records found: {s.total} | Completed: {s.completed} | Pending: {s.pending}")
        return EXIT_OK

    return _run(store, flow)


def _cmd_grades(args: argparse.Namespace, store: SessionStore) -> int:
    """
    Enter grades for one record, then refresh and show the updated row.
    """
    changes: dict[str, Any] = {}
    for attr, value in (
        ("supervisor_grade", args.supervisor),
        ("report_grade", args.report),
        ("defense_grade", args.defense),
        ("notes", args.notes),
    ):
        if value is not None:
            changes[attr] = value

    if not changes:
        print("Please provide at least one of --supervisor, --report, --defense, --notes.")
        return EXIT_ERROR

    async def flow() -> int:
        client = ApiClient(store)
        controller = ResultSetController(client)
        await controller.search(_criteria_from_args(args))

        record = controller.find(args.record_id)
        if record is None:
            print(f"Record not found: {args.record_id}")
            return EXIT_ERROR

        user = store.current_user()
        if user is None:
            print(NOT_LOGGED_IN)
            return EXIT_AUTH

        session = GradeEditSession(client)
        confirm = (lambda _q: True) if args.yes else _ask_yes_no
        draft = session.open(record, user, confirm=confirm)
        if draft is None:
            print("Cancelled.")
            return EXIT_OK

        session.update_draft(**changes)
        message = await session.submit()
        print(message)

        await controller.refresh()
        updated = controller.find(args.record_id)
        if updated is not None:
            print(_row_line(updated, COMPACT_HEADERS))
        return EXIT_OK

    return _run(store, flow)


def _cmd_export(args: argparse.Namespace, store: SessionStore) -> int:
    """
    Export the displayed rows (after filters and sorting) to .xlsx.
    """
    out_path = Path((args.out or EXPORT_FILENAME).strip())
    if out_path.suffix.lower() != ".xlsx":
        out_path = out_path.with_suffix(".xlsx")

    async def flow() -> int:
        controller = await _load_view(store, args)
        view = controller.view()
        if view.is_empty:
            print("No data in the table to export.")
            return EXIT_OK

        n = export_rows_to_xlsx(view, out_path)
        print(f"Exported {n} records to: {out_path}")
        return EXIT_OK

    return _run(store, flow)


def _cmd_print(args: argparse.Namespace, store: SessionStore) -> int:
    out_path = Path((args.out or PRINT_FILENAME).strip())

    async def flow() -> int:
        controller = await _load_view(store, args)
        view = controller.view()
        if view.is_empty:
            print("No data in the table to print.")
            return EXIT_OK

        n = write_print_view(view, out_path)
        print(f"Print view with {n} records written to: {out_path}")
        return EXIT_OK

    return _run(store, flow)


def _add_filter_args(p: argparse.ArgumentParser, sort: bool = True) -> None:
    p.add_argument("--status", type=str, help="Status (e.g. Concluído, ALUNO)")
    p.add_argument("--course", type=str, help="Course")
    p.add_argument("--advisor", type=str, help="Advisor name")
    p.add_argument("--cohort", type=str, help="Class/cohort")
    p.add_argument("--year", type=str, help="Year")
    p.add_argument("--name", type=str, help="Student name (substring)")
    p.add_argument("--cpf", type=str, help="CPF (substring)")
    p.add_argument("--company", type=str, help="Company")
    if sort:
        p.add_argument(
            "--sort",
            action="append",
            metavar="COLUMN",
            help="Sort by column; repeat the same column to sort descending",
        )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="estagios", description="Internship records CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_login = sub.add_parser("login", help="Store an API token and your name")
    p_login.add_argument("--token", type=str, required=True, help="Bearer token issued by the API")
    p_login.add_argument("--name", type=str, required=True, help="Your name as registered (advisor name)")

    sub.add_parser("logout", help="Forget the stored token")
    sub.add_parser("options", help="Show available filter values")

    p_search = sub.add_parser("search", help="Search records")
    _add_filter_args(p_search)

    p_grades = sub.add_parser("grades", help="Enter grades for one record")
    p_grades.add_argument("record_id", type=str, help="Record id (idRegistro)")
    p_grades.add_argument("--supervisor", type=str, help="Supervisor grade")
    p_grades.add_argument("--report", type=str, help="Report grade")
    p_grades.add_argument("--defense", type=str, help="Defense grade")
    p_grades.add_argument("--notes", type=str, help="Notes")
    p_grades.add_argument("--yes", "-y", action="store_true", help="Overwrite existing grades without asking")
    _add_filter_args(p_grades, sort=False)

    p_export = sub.add_parser("export", help="Export displayed records to .xlsx")
    p_export.add_argument("out", type=str, nargs="?", default=EXPORT_FILENAME, help="Output file (.xlsx)")
    _add_filter_args(p_export)

    p_print = sub.add_parser("print", help="Write a printable HTML view")
    p_print.add_argument("out", type=str, nargs="?", default=PRINT_FILENAME, help="Output file (.html)")
    _add_filter_args(p_print)

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    store = SessionStore()

    handlers: dict[str, Callable[[argparse.Namespace, SessionStore], int]] = {
        "login": _cmd_login,
        "logout": _cmd_logout,
        "options": _cmd_options,
        "search": _cmd_search,
        "grades": _cmd_grades,
        "export": _cmd_export,
        "print": _cmd_print,
    }

    if args.command in handlers:
        raise SystemExit(handlers[args.command](args, store))

    if args.command == "interactive":
        from estagios.interactive import run_interactive

        raise SystemExit(run_interactive(store))

    raise SystemExit(EXIT_ERROR)
