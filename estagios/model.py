"""
Central data model definitions used across the project.

The API speaks in its own column names ("idRegistro", "nome-orientador",
"Nota Supervisor", ...). Records keep the raw row so any column can be
displayed, sorted or exported, and expose typed accessors for the fields the
client actually reasons about.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from estagios.errors import ValidationError

# Columns shown in the results table, in display order.
DISPLAY_HEADERS: list[str] = [
    "idRegistro",
    "statusPreenchimento",
    "nome-completo",
    "cpf",
    "matricula",
    "data-nascimento",
    "email-aluno",
    "telefone-aluno",
    "curso",
    "turma-fase",
    "nome-orientador",
    "nome-concedente",
    "responsavel-concedente",
    "telefone-concedente",
    "email-concedente",
    "cidade-empresa",
    "uf-empresa",
    "nome-supervisor",
    "cargo-supervisor",
    "email-supervisor",
    "data-inicio-estagio",
    "data-termino-estagio",
    "area-estagio",
    "atividades-previstas",
    "Nota Supervisor",
    "Nota Relatório",
    "Nota da Defesa",
    "Média",
    "Observações",
]

# Narrow subset for terminal output.
COMPACT_HEADERS: list[str] = [
    "idRegistro",
    "statusPreenchimento",
    "nome-completo",
    "curso",
    "turma-fase",
    "nome-orientador",
    "Nota Supervisor",
    "Nota Relatório",
    "Nota da Defesa",
    "Média",
]

STATUS_COMPLETED = "Concluído"
STATUS_PENDING = "ALUNO"

ASC = "asc"
DESC = "desc"


def is_blank(value: Any) -> bool:
    """None and whitespace-only strings count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass
class StudentRecord:
    """
    One row of internship data as returned by /student-data.
    """

    record_id: str
    fields: dict[str, Any]

    @classmethod
    def from_api(cls, row: dict[str, Any]) -> "StudentRecord":
        raw_id = row.get("idRegistro")
        if is_blank(raw_id):
            raise ValidationError("Record without idRegistro in API response.")
        return cls(record_id=str(raw_id).strip(), fields=dict(row))

    def get(self, column: str) -> Any:
        return self.fields.get(column)

    @property
    def status(self) -> Optional[str]:
        return self.fields.get("statusPreenchimento")

    @property
    def full_name(self) -> Optional[str]:
        return self.fields.get("nome-completo")

    @property
    def course(self) -> Optional[str]:
        return self.fields.get("curso")

    @property
    def cohort(self) -> Optional[str]:
        return self.fields.get("turma-fase")

    @property
    def advisor_name(self) -> Optional[str]:
        return self.fields.get("nome-orientador")

    @property
    def company_name(self) -> Optional[str]:
        return self.fields.get("nome-concedente")

    @property
    def supervisor_grade(self) -> Any:
        return self.fields.get("Nota Supervisor")

    @property
    def report_grade(self) -> Any:
        return self.fields.get("Nota Relatório")

    @property
    def defense_grade(self) -> Any:
        return self.fields.get("Nota da Defesa")

    @property
    def average(self) -> Any:
        return self.fields.get("Média")

    @property
    def notes(self) -> Optional[str]:
        return self.fields.get("Observações")

    @property
    def has_grades(self) -> bool:
        grades = (self.supervisor_grade, self.report_grade, self.defense_grade)
        return any(not is_blank(g) for g in grades)


@dataclass
class FilterCriteria:
    """
    Search filters. Empty or None means "no constraint".
    """

    status: Optional[str] = None
    course: Optional[str] = None
    advisor: Optional[str] = None
    cohort: Optional[str] = None
    year: Optional[str] = None
    name: Optional[str] = None
    cpf: Optional[str] = None
    company: Optional[str] = None

    # attribute -> API body key
    _API_KEYS = {
        "status": "status",
        "course": "curso",
        "advisor": "orientador",
        "cohort": "turma",
        "year": "ano",
        "name": "nome",
        "cpf": "cpf",
        "company": "empresa",
    }

    def to_payload(self) -> dict[str, str]:
        payload: dict[str, str] = {}
        for attr, key in self._API_KEYS.items():
            value = getattr(self, attr)
            if not is_blank(value):
                payload[key] = str(value).strip()
        return payload

    def is_empty(self) -> bool:
        return not self.to_payload()


@dataclass(frozen=True)
class SortState:
    column: Optional[str] = None
    direction: str = ASC

    def toggled(self, column: str) -> "SortState":
        """
        Same column flips the direction, a new column starts ascending.
        """
        if self.column == column:
            return SortState(column=column, direction=DESC if self.direction == ASC else ASC)
        return SortState(column=column, direction=ASC)


@dataclass
class GradeEditDraft:
    record_id: str
    supervisor_grade: Any = None
    report_grade: Any = None
    defense_grade: Any = None
    notes: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        def clean(v: Any) -> Any:
            return "" if v is None else v

        return {
            "idRegistro": self.record_id,
            "notaSupervisor": clean(self.supervisor_grade),
            "notaRelatorio": clean(self.report_grade),
            "notaDefesa": clean(self.defense_grade),
            "observacoes": clean(self.notes),
        }


@dataclass
class UserIdentity:
    name: str
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, user: dict[str, Any]) -> "UserIdentity":
        name = user.get("nome")
        if is_blank(name):
            raise ValidationError("User without nome.")
        return cls(name=str(name), raw=dict(user))


@dataclass
class FilterOptions:
    status: list[str] = field(default_factory=list)
    courses: list[str] = field(default_factory=list)
    advisors: list[str] = field(default_factory=list)
    cohorts: list[str] = field(default_factory=list)
    years: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Optional[dict[str, Any]]) -> "FilterOptions":
        data = data or {}

        def as_list(key: str) -> list[str]:
            values = data.get(key) or []
            if not isinstance(values, list):
                return []
            return [str(v) for v in values if not is_blank(v)]

        return cls(
            status=as_list("status"),
            courses=as_list("cursos"),
            advisors=as_list("orientadores"),
            cohorts=as_list("turmas"),
            years=as_list("anos"),
        )


@dataclass
class SearchStats:
    total: int = 0
    completed: int = 0
    pending: int = 0

    @classmethod
    def from_api(cls, stats: dict[str, Any]) -> "SearchStats":
        return cls(
            total=int(stats.get("total") or 0),
            completed=int(stats.get("completos") or 0),
            pending=int(stats.get("pendentes") or 0),
        )

    @classmethod
    def from_records(cls, records: list[StudentRecord]) -> "SearchStats":
        return cls(
            total=len(records),
            completed=sum(1 for r in records if r.status == STATUS_COMPLETED),
            pending=sum(1 for r in records if r.status == STATUS_PENDING),
        )


@dataclass
class SearchResult:
    records: list[StudentRecord]
    stats: SearchStats


@dataclass
class TableView:
    """
    Everything the renderer and exporter are allowed to see.
    """

    headers: list[str]
    rows: list[StudentRecord]
    sort_state: SortState = field(default_factory=SortState)
    stats: Optional[SearchStats] = None

    @property
    def is_empty(self) -> bool:
        return not self.rows
