"""
Grade entry for a single record.

The advisor check here is a convenience for the user, not a security
boundary: the API authorizes /update-grades on its own.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from estagios.api import ApiClient
from estagios.errors import EstagiosError, PermissionDeniedError
from estagios.log import get_logger
from estagios.model import GradeEditDraft, StudentRecord, UserIdentity

logger = get_logger(__name__)

OVERWRITE_QUESTION = "This student already has grades. View and/or replace them?"
ACCESS_DENIED = "Access denied: you are not this student's advisor."


def normalize_name(name: Optional[str]) -> str:
    """
    Collapse internal whitespace, strip and upper-case.
    """
    if not name:
        return ""
    return " ".join(str(name).split()).upper()


def is_advisor(record: StudentRecord, user: UserIdentity) -> bool:
    advisor = normalize_name(record.advisor_name)
    return bool(advisor) and advisor == normalize_name(user.name)


def confirm_overwrite(has_existing_grades: bool, ask: Callable[[str], bool]) -> bool:
    """
    Ask before editing a record that already has grades.
    """
    if not has_existing_grades:
        return True
    return bool(ask(OVERWRITE_QUESTION))


class GradeEditSession:
    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self.draft: Optional[GradeEditDraft] = None
        self.record: Optional[StudentRecord] = None
        self.saving = False

    def open(
        self,
        record: StudentRecord,
        current_user: UserIdentity,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> Optional[GradeEditDraft]:
        """
        Start editing `record`.

        Raises PermissionDeniedError if `current_user` is not the advisor.
        Returns None (no draft, no error) when the record already has grades
        and `confirm` declines the overwrite. Without `confirm` the caller is
        assumed to have confirmed already.
        """
        if not is_advisor(record, current_user):
            logger.info("Grade edit denied for record %s", record.record_id)
            raise PermissionDeniedError(ACCESS_DENIED)

        if confirm is not None and not confirm_overwrite(record.has_grades, confirm):
            return None

        self.record = record
        self.draft = GradeEditDraft(
            record_id=record.record_id,
            supervisor_grade=record.supervisor_grade,
            report_grade=record.report_grade,
            defense_grade=record.defense_grade,
            notes=record.notes,
        )
        return self.draft

    def update_draft(self, **changes: Any) -> GradeEditDraft:
        if self.draft is None:
            raise EstagiosError("No grade edit in progress.")
        for key, value in changes.items():
            if key == "record_id" or not hasattr(self.draft, key):
                raise TypeError(f"Unknown draft field: {key}")
            setattr(self.draft, key, value)
        return self.draft

    def cancel(self) -> None:
        self.draft = None
        self.record = None

    async def submit(self, draft: Optional[GradeEditDraft] = None) -> str:
        """
        Send the draft. On success the session is cleared and the server
        message returned; the caller should then refresh the result set.
        On failure the draft stays so the user can retry.
        """
        if draft is not None:
            self.draft = draft
        draft = self.draft
        if draft is None:
            raise EstagiosError("No grade edit in progress.")

        self.saving = True
        try:
            message = await self._client.update_grades(draft)
        finally:
            self.saving = False

        logger.info("Grades saved for record %s", draft.record_id)
        self.cancel()
        return message
