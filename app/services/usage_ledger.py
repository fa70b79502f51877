import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.out_manage import Contract, UsageEntry
from app.schemas.out_manage import (
    ApprovalStatus,
    UsageDetailResponse,
    UsageEntryResponse,
    UsageSaveRequest,
    UsageSummaryResponse,
)
from app.services.code_service import APPROVAL_STATUS_GROUP, LEAVE_TYPE_GROUP, code_names
from app.services.contract_ledger import contract_filters, staff_join
from app.services.period_utils import (
    normalize_optional_ymd,
    normalize_text,
    normalize_ymd,
    require_fields,
    to_decimal,
    trim_to_none,
)
from app.services.transactions import atomic
from models import Staff

logger = logging.getLogger("ops-portal-api")


def _approved_usage_subquery():
    # Only approved entries whose span sits inside the contract count as used.
    return (
        select(func.coalesce(func.sum(func.coalesce(UsageEntry.quantity, 0)), 0))
        .where(
            UsageEntry.tenant_id == Contract.tenant_id,
            UsageEntry.staff_id == Contract.staff_id,
            UsageEntry.approval_status_code == ApprovalStatus.APPROVED.value,
            UsageEntry.period_start >= Contract.period_start,
            UsageEntry.period_end <= Contract.period_end,
        )
        .correlate(Contract)
        .scalar_subquery()
    )


def list_usage_summary(
    db: Session, tenant_id: str, as_of: str | None, name: str | None
) -> list[UsageSummaryResponse]:
    rows = db.execute(
        select(Contract, Staff.name, _approved_usage_subquery().label("used"))
        .outerjoin(Staff, staff_join())
        .where(*contract_filters(tenant_id, as_of, name))
        .order_by(Contract.period_start.desc(), Contract.staff_id.asc())
    ).all()

    summaries: list[UsageSummaryResponse] = []
    for contract, staff_name, used in rows:
        total = to_decimal(contract.total_entitlement) + to_decimal(
            contract.service_entitlement
        )
        used_total = to_decimal(used)
        summaries.append(
            UsageSummaryResponse(
                staff_id=contract.staff_id,
                name=staff_name,
                period_start=contract.period_start,
                period_end=contract.period_end,
                total=total,
                used=used_total,
                remaining=total - used_total,
                note=contract.note,
            )
        )
    return summaries


def list_usage_detail(
    db: Session, tenant_id: str, staff_id: str, period_start: str, period_end: str
) -> list[UsageDetailResponse]:
    staff_id = normalize_text(staff_id)
    start = normalize_ymd(period_start)
    end = normalize_ymd(period_end)
    require_fields(
        [("staff_id", staff_id), ("period_start", start), ("period_end", end)]
    )

    entries = db.scalars(
        select(UsageEntry)
        .where(
            UsageEntry.tenant_id == tenant_id,
            UsageEntry.staff_id == staff_id,
            UsageEntry.period_start >= start,
            UsageEntry.period_end <= end,
        )
        .order_by(UsageEntry.requested_on.desc().nulls_last(), UsageEntry.id.desc())
    ).all()
    if not entries:
        return []

    leave_names = code_names(db, tenant_id, LEAVE_TYPE_GROUP)
    status_names = code_names(db, tenant_id, APPROVAL_STATUS_GROUP)
    return [
        UsageDetailResponse(
            id=entry.id,
            staff_id=entry.staff_id,
            leave_type_code=entry.leave_type_code,
            leave_type_name=leave_names.get(entry.leave_type_code, entry.leave_type_code),
            requested_on=entry.requested_on,
            approval_status_code=entry.approval_status_code,
            approval_status_name=status_names.get(
                entry.approval_status_code, entry.approval_status_code
            ),
            approval_status=ApprovalStatus.parse(entry.approval_status_code),
            period_start=entry.period_start,
            period_end=entry.period_end,
            quantity=entry.quantity,
            note=entry.note,
        )
        for entry in entries
    ]


def save_usage_entry(
    db: Session, tenant_id: str, data: UsageSaveRequest, editor_id: str
) -> UsageEntryResponse:
    """Insert when ``data.id`` is empty, otherwise overwrite that entry in place.

    The period is taken as given; it is not checked against an existing contract.
    """
    staff_id = normalize_text(data.staff_id)
    start = normalize_ymd(data.period_start)
    end = normalize_ymd(data.period_end)
    require_fields(
        [("staff_id", staff_id), ("period_start", start), ("period_end", end)]
    )
    values = {
        "staff_id": staff_id,
        "leave_type_code": trim_to_none(data.leave_type_code),
        "requested_on": normalize_optional_ymd(data.requested_on),
        "approval_status_code": trim_to_none(data.approval_status_code),
        "period_start": start,
        "period_end": end,
        "quantity": to_decimal(data.quantity) if data.quantity is not None else Decimal("0"),
        "note": trim_to_none(data.note),
        "last_editor_id": editor_id,
        "last_edited_at": datetime.utcnow(),
    }

    if data.id is None:
        entry = UsageEntry(tenant_id=tenant_id, **values)
        with atomic(db, "Usage entry could not be saved."):
            db.add(entry)
        db.refresh(entry)
        return UsageEntryResponse.model_validate(entry)

    entry = db.scalar(
        select(UsageEntry).where(
            UsageEntry.id == data.id, UsageEntry.tenant_id == tenant_id
        )
    )
    if not entry:
        raise NotFoundError(f"Usage entry {data.id} not found.", id=data.id)
    with atomic(db, "Usage entry could not be saved."):
        for field, value in values.items():
            setattr(entry, field, value)
    db.refresh(entry)
    return UsageEntryResponse.model_validate(entry)


def delete_usage_entries(db: Session, tenant_id: str, ids: list[int]) -> bool:
    if not ids:
        return False
    with atomic(db, "Usage entries could not be deleted."):
        deleted = db.execute(
            delete(UsageEntry).where(
                UsageEntry.tenant_id == tenant_id, UsageEntry.id.in_(ids)
            )
        ).rowcount or 0
    logger.info("Deleted %d of %d usage entries for %s", deleted, len(ids), tenant_id)
    return deleted > 0
