from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.schemas.out_manage import (
    UsageDeleteRequest,
    UsageDetailListResponse,
    UsageEntryResponse,
    UsageSaveRequest,
    UsageSummaryListResponse,
)
from app.security.auth import get_current_user
from app.services import usage_ledger
from app.services.audit_service import AuditAction, AuditSink, get_audit_sink, record_action
from db import get_db
from models import Staff

router = APIRouter(prefix="/out-manage/usage", tags=["out-manage-time"])


@router.get("", response_model=UsageSummaryListResponse)
def list_usage_summary(
    as_of: str | None = None,
    name: str | None = None,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UsageSummaryListResponse:
    content = usage_ledger.list_usage_summary(db, user.tenant_id, as_of, name)
    return UsageSummaryListResponse(content=content)


@router.get("/{staff_id}", response_model=UsageDetailListResponse)
def list_usage_detail(
    staff_id: str,
    period_start: str = Query(..., min_length=1),
    period_end: str = Query(..., min_length=1),
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UsageDetailListResponse:
    content = usage_ledger.list_usage_detail(
        db, user.tenant_id, staff_id, period_start, period_end
    )
    return UsageDetailListResponse(content=content)


@router.post("", response_model=UsageEntryResponse)
def save_usage_entry(
    payload: UsageSaveRequest,
    request: Request,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditSink = Depends(get_audit_sink),
) -> UsageEntryResponse:
    try:
        saved = usage_ledger.save_usage_entry(db, user.tenant_id, payload, user.staff_id)
    except Exception as exc:
        record_action(
            audit, request, user.staff_id, AuditAction.OUT_MANAGE_TIME_SAVE,
            success=False, error_message=str(exc),
        )
        raise
    record_action(audit, request, user.staff_id, AuditAction.OUT_MANAGE_TIME_SAVE)
    return saved


@router.delete("", response_model=bool)
def delete_usage_entries(
    payload: UsageDeleteRequest,
    request: Request,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditSink = Depends(get_audit_sink),
) -> bool:
    try:
        deleted = usage_ledger.delete_usage_entries(db, user.tenant_id, payload.ids)
    except Exception as exc:
        record_action(
            audit, request, user.staff_id, AuditAction.OUT_MANAGE_TIME_DELETE,
            success=False, error_message=str(exc),
        )
        raise
    record_action(audit, request, user.staff_id, AuditAction.OUT_MANAGE_TIME_DELETE)
    return deleted
