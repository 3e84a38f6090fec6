"""Submission Pydantic schemas."""


from datetime import datetime

from app.domain.enums import SubmissionStatus
from app.schemas.common import CamelModel

class DocumentIn(CamelModel):
    kind: str
    reference: str

class SubmissionCreate(CamelModel):
    # Defaults to the calling supplier's own account
    account_id: str | None = None
    documents: list[DocumentIn]

class VerifyIn(CamelModel):
    notes: str | None = None

class RejectIn(CamelModel):
    reason: str | None = None

class DocumentOut(CamelModel):
    kind: str
    reference: str

class SubmissionOut(CamelModel):
    id: str
    account_id: str
    documents: list[DocumentOut]
    document_count: int
    status: SubmissionStatus
    reviewer_id: str | None = None
    rejection_reason: str | None = None
    review_notes: str | None = None
    claimed_at: datetime | None = None
    released_at: datetime | None = None
    verified_at: datetime | None = None
    rejected_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
