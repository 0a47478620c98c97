"""Backup and restore schema definitions."""

from typing import List

from pydantic import BaseModel, Field

from help_system.core.exceptions import BackupMalformedError
from help_system.schemas.common import RestoreMode


class BackupWarning(BaseModel):
    """A backup row that was skipped during restore."""

    kind: str = BackupMalformedError.kind
    line_number: int
    reason: str

    @classmethod
    def from_error(cls, error: BackupMalformedError) -> "BackupWarning":
        return cls(line_number=error.line_number, reason=error.reason)


class RestoreReport(BaseModel):
    mode: RestoreMode
    imported: int = Field(default=0, description="Rows inserted.")
    duplicates: int = Field(default=0, description="Rows skipped because they already exist.")
    warnings: List[BackupWarning] = Field(default_factory=list)


class RestoreRequest(BaseModel):
    content: str = Field(description="Full text of a backup file, header included.")
    mode: RestoreMode = RestoreMode.MERGE
