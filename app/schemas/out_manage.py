from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApprovalStatus(str, Enum):
    REQUESTED = "10"
    APPROVED = "20"
    REJECTED = "30"

    @classmethod
    def parse(cls, code: str | None) -> "ApprovalStatus | None":
        if not code:
            return None
        try:
            return cls(code.strip())
        except ValueError:
            return None


class ContractUpsertRequest(BaseModel):
    staff_id: str = Field(..., min_length=1, max_length=50)
    period_start: str = Field(..., min_length=1, max_length=10)
    period_end: str = Field(..., min_length=1, max_length=10)
    total_entitlement: Decimal | None = Field(default=None, max_digits=7, decimal_places=2)
    service_entitlement: Decimal | None = Field(default=None, max_digits=7, decimal_places=2)
    note: str | None = None
    original_period_start: str | None = Field(default=None, max_length=10)


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    staff_id: str
    name: str | None = None
    period_start: str
    period_end: str
    total_entitlement: Decimal | None = None
    service_entitlement: Decimal | None = None
    note: str | None = None
    last_editor_id: str | None = None
    last_edited_at: datetime | None = None


class ContractPageResponse(BaseModel):
    content: list[ContractResponse]
    total_elements: int
    total_pages: int
    page: int
    size: int


class DuplicateCheckResponse(BaseModel):
    duplicates: str | None = None


class ContractKey(BaseModel):
    staff_id: str = Field(..., min_length=1)
    period_start: str = Field(..., min_length=1)


class ContractDeleteRequest(BaseModel):
    keys: list[ContractKey] = Field(default_factory=list)


class MutationCountResponse(BaseModel):
    succeeded: int
    failed: int


class UsageSummaryResponse(BaseModel):
    staff_id: str
    name: str | None = None
    period_start: str
    period_end: str
    total: Decimal
    used: Decimal
    remaining: Decimal
    note: str | None = None


class UsageSummaryListResponse(BaseModel):
    content: list[UsageSummaryResponse]


class UsageDetailResponse(BaseModel):
    id: int
    staff_id: str
    leave_type_code: str | None = None
    leave_type_name: str | None = None
    requested_on: str | None = None
    approval_status_code: str | None = None
    approval_status_name: str | None = None
    approval_status: ApprovalStatus | None = None
    period_start: str
    period_end: str
    quantity: Decimal | None = None
    note: str | None = None


class UsageDetailListResponse(BaseModel):
    content: list[UsageDetailResponse]


class UsageSaveRequest(BaseModel):
    id: int | None = None
    staff_id: str = Field(..., min_length=1, max_length=50)
    leave_type_code: str | None = Field(default=None, max_length=20)
    requested_on: str | None = Field(default=None, max_length=10)
    approval_status_code: str | None = Field(default=None, max_length=20)
    period_start: str = Field(..., min_length=1, max_length=10)
    period_end: str = Field(..., min_length=1, max_length=10)
    quantity: Decimal | None = Field(default=None, max_digits=7, decimal_places=2)
    note: str | None = None


class UsageEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    staff_id: str
    leave_type_code: str | None = None
    requested_on: str | None = None
    approval_status_code: str | None = None
    period_start: str
    period_end: str
    quantity: Decimal
    note: str | None = None


class UsageDeleteRequest(BaseModel):
    ids: list[int] = Field(default_factory=list)
