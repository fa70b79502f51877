from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.schemas.out_manage import (
    ContractDeleteRequest,
    ContractPageResponse,
    ContractResponse,
    ContractUpsertRequest,
    DuplicateCheckResponse,
    MutationCountResponse,
)
from app.security.auth import get_current_user
from app.services import contract_ledger
from app.services.audit_service import AuditAction, AuditSink, get_audit_sink, record_action
from db import get_db
from models import Staff

router = APIRouter(prefix="/out-manage/contracts", tags=["out-manage"])


@router.get("", response_model=ContractPageResponse)
def search_contracts(
    page: int = 0,
    size: int = 20,
    as_of: str | None = None,
    name: str | None = None,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContractPageResponse:
    return contract_ledger.search_contracts(db, user.tenant_id, page, size, as_of, name)


@router.get("/duplicates", response_model=DuplicateCheckResponse)
def check_duplicate_contract(
    staff_id: str = Query(..., min_length=1),
    period_start: str = Query(..., min_length=1),
    period_end: str = Query(..., min_length=1),
    original_period_start: str | None = None,
    strict: bool = False,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DuplicateCheckResponse:
    duplicates = contract_ledger.find_duplicate_periods(
        db,
        user.tenant_id,
        staff_id,
        period_start,
        period_end,
        exclude_period_start=original_period_start,
        strict=strict,
    )
    return DuplicateCheckResponse(duplicates=duplicates)


@router.post(
    "",
    response_model=ContractResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_contract(
    payload: ContractUpsertRequest,
    request: Request,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditSink = Depends(get_audit_sink),
) -> ContractResponse:
    try:
        created = contract_ledger.create_contract(db, user.tenant_id, payload, user.staff_id)
    except Exception as exc:
        record_action(
            audit, request, user.staff_id, AuditAction.OUT_MANAGE_INSERT,
            success=False, error_message=str(exc),
        )
        raise
    record_action(audit, request, user.staff_id, AuditAction.OUT_MANAGE_INSERT)
    return created


@router.put("", response_model=ContractResponse)
def update_contract(
    payload: ContractUpsertRequest,
    request: Request,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditSink = Depends(get_audit_sink),
) -> ContractResponse:
    try:
        updated = contract_ledger.update_contract(db, user.tenant_id, payload, user.staff_id)
        if updated is None:
            raise NotFoundError("Contract not found.")
    except Exception as exc:
        record_action(
            audit, request, user.staff_id, AuditAction.OUT_MANAGE_UPDATE,
            success=False, error_message=str(exc),
        )
        raise
    record_action(audit, request, user.staff_id, AuditAction.OUT_MANAGE_UPDATE)
    return updated


@router.delete("", response_model=MutationCountResponse)
def delete_contracts(
    payload: ContractDeleteRequest,
    request: Request,
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditSink = Depends(get_audit_sink),
) -> MutationCountResponse:
    try:
        result = contract_ledger.delete_contracts(db, user.tenant_id, payload.keys)
    except Exception as exc:
        record_action(
            audit, request, user.staff_id, AuditAction.OUT_MANAGE_DELETE,
            success=False, error_message=str(exc),
        )
        raise
    record_action(audit, request, user.staff_id, AuditAction.OUT_MANAGE_DELETE)
    return result
