import logging
import math
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.orm import Session

from app.models.out_manage import Contract
from app.schemas.out_manage import (
    ContractKey,
    ContractPageResponse,
    ContractResponse,
    ContractUpsertRequest,
    MutationCountResponse,
)
from app.services.period_utils import (
    format_ymd,
    months_between,
    normalize_text,
    normalize_ymd,
    periods_conflict,
    require_fields,
    to_decimal,
    trim_to_none,
)
from app.services.transactions import atomic
from models import Staff

logger = logging.getLogger("ops-portal-api")


def staff_join():
    return and_(
        Staff.tenant_id == Contract.tenant_id,
        Staff.staff_id == Contract.staff_id,
    )


def contract_filters(tenant_id: str, as_of: str | None, name: str | None) -> list:
    filters = [Contract.tenant_id == tenant_id]
    as_of_ymd = normalize_ymd(as_of)
    if as_of_ymd:
        filters.append(Contract.period_start <= as_of_ymd)
        filters.append(Contract.period_end >= as_of_ymd)
    name_filter = normalize_text(name)
    if name_filter:
        filters.append(func.coalesce(Staff.name, "").ilike(f"%{name_filter}%"))
    return filters


def _key_filter(tenant_id: str, staff_id: str, period_start: str):
    return and_(
        Contract.tenant_id == tenant_id,
        Contract.staff_id == staff_id,
        Contract.period_start == period_start,
    )


def _to_response(contract: Contract, name: str | None) -> ContractResponse:
    response = ContractResponse.model_validate(contract, from_attributes=True)
    return response.model_copy(update={"name": name})


def _resolve_entitlements(
    data: ContractUpsertRequest, period_start: str, period_end: str
) -> tuple[Decimal, Decimal]:
    total = data.total_entitlement
    if total is None:
        total = Decimal(months_between(period_start, period_end))
    service = data.service_entitlement
    if service is None:
        service = Decimal("0")
    return to_decimal(total), to_decimal(service)


def find_contract(
    db: Session, tenant_id: str, staff_id: str, period_start: str
) -> ContractResponse | None:
    row = db.execute(
        select(Contract, Staff.name)
        .outerjoin(Staff, staff_join())
        .where(_key_filter(tenant_id, staff_id, period_start))
        .limit(1)
    ).first()
    if not row:
        return None
    contract, name = row
    return _to_response(contract, name)


def search_contracts(
    db: Session,
    tenant_id: str,
    page: int,
    size: int,
    as_of: str | None,
    name: str | None,
) -> ContractPageResponse:
    safe_page = max(page, 0)
    safe_size = max(size, 1)
    filters = contract_filters(tenant_id, as_of, name)

    rows = db.execute(
        select(Contract, Staff.name)
        .outerjoin(Staff, staff_join())
        .where(*filters)
        .order_by(Contract.period_start.desc(), Contract.staff_id.asc())
        .limit(safe_size)
        .offset(safe_page * safe_size)
    ).all()
    total = db.scalar(
        select(func.count())
        .select_from(Contract)
        .outerjoin(Staff, staff_join())
        .where(*filters)
    ) or 0

    return ContractPageResponse(
        content=[_to_response(contract, staff_name) for contract, staff_name in rows],
        total_elements=total,
        total_pages=math.ceil(total / safe_size),
        page=safe_page,
        size=safe_size,
    )


def find_duplicate_periods(
    db: Session,
    tenant_id: str,
    staff_id: str,
    period_start: str,
    period_end: str,
    exclude_period_start: str | None = None,
    strict: bool = False,
) -> str | None:
    """Describe existing periods of the staff member that clash with the candidate.

    Advisory only: the primary key on (tenant, staff, period_start) is what
    actually rejects a concurrent duplicate insert.
    """
    staff_id = normalize_text(staff_id)
    start = normalize_ymd(period_start)
    end = normalize_ymd(period_end)
    require_fields(
        [("staff_id", staff_id), ("period_start", start), ("period_end", end)]
    )
    excluded = normalize_ymd(exclude_period_start)

    stmt = select(Contract.period_start, Contract.period_end).where(
        Contract.tenant_id == tenant_id, Contract.staff_id == staff_id
    )
    if excluded:
        stmt = stmt.where(Contract.period_start != excluded)
    rows = db.execute(stmt.order_by(Contract.period_start.asc())).all()

    clashes = [
        f"{format_ymd(existing_start)}~{format_ymd(existing_end)}"
        for existing_start, existing_end in rows
        if periods_conflict((start, end), (existing_start, existing_end), strict=strict)
    ]
    if not clashes:
        return None
    return ",".join(clashes)


def create_contract(
    db: Session, tenant_id: str, data: ContractUpsertRequest, editor_id: str
) -> ContractResponse:
    staff_id = normalize_text(data.staff_id)
    start = normalize_ymd(data.period_start)
    end = normalize_ymd(data.period_end)
    require_fields(
        [("staff_id", staff_id), ("period_start", start), ("period_end", end)]
    )
    total, service = _resolve_entitlements(data, start, end)

    with atomic(
        db,
        f"Contract period starting {format_ymd(start)} already exists for {staff_id}.",
        conflicts=f"{format_ymd(start)}~{format_ymd(end)}",
    ):
        db.execute(
            insert(Contract).values(
                tenant_id=tenant_id,
                staff_id=staff_id,
                period_start=start,
                period_end=end,
                total_entitlement=total,
                service_entitlement=service,
                note=trim_to_none(data.note),
                last_editor_id=editor_id,
                last_edited_at=datetime.utcnow(),
            )
        )

    created = find_contract(db, tenant_id, staff_id, start)
    if created is None:
        raise RuntimeError("Failed to load inserted contract row.")
    return created


def update_contract(
    db: Session, tenant_id: str, data: ContractUpsertRequest, editor_id: str
) -> ContractResponse | None:
    """Update a contract, moving it to a new period start when that changed.

    period_start is part of the primary key, so a changed start is a delete of
    the old row plus an insert of the new one inside a single transaction.
    """
    staff_id = normalize_text(data.staff_id)
    start = normalize_ymd(data.period_start)
    end = normalize_ymd(data.period_end)
    require_fields(
        [("staff_id", staff_id), ("period_start", start), ("period_end", end)]
    )
    lookup_start = normalize_ymd(data.original_period_start) or start
    total, service = _resolve_entitlements(data, start, end)

    existing = db.scalar(
        select(Contract.period_start).where(
            _key_filter(tenant_id, staff_id, lookup_start)
        )
    )
    if existing is None:
        return None

    values = {
        "period_end": end,
        "total_entitlement": total,
        "service_entitlement": service,
        "note": trim_to_none(data.note),
        "last_editor_id": editor_id,
        "last_edited_at": datetime.utcnow(),
    }
    conflict_message = (
        f"Contract period starting {format_ymd(start)} already exists for {staff_id}."
    )
    conflicts = f"{format_ymd(start)}~{format_ymd(end)}"

    if lookup_start != start:
        with atomic(db, conflict_message, conflicts=conflicts):
            db.execute(
                delete(Contract).where(_key_filter(tenant_id, staff_id, lookup_start))
            )
            db.execute(
                insert(Contract).values(
                    tenant_id=tenant_id,
                    staff_id=staff_id,
                    period_start=start,
                    **values,
                )
            )
        logger.info(
            "Moved contract %s/%s from %s to %s", tenant_id, staff_id, lookup_start, start
        )
    else:
        with atomic(db, conflict_message, conflicts=conflicts):
            db.execute(
                update(Contract)
                .where(_key_filter(tenant_id, staff_id, start))
                .values(**values)
            )

    return find_contract(db, tenant_id, staff_id, start)


def delete_contracts(
    db: Session, tenant_id: str, keys: Iterable[ContractKey]
) -> MutationCountResponse:
    requested = 0
    succeeded = 0
    for key in keys:
        staff_id = normalize_text(key.staff_id)
        start = normalize_ymd(key.period_start)
        if not staff_id or not start:
            continue
        requested += 1
        with atomic(db, "Contract is in use."):
            deleted = db.execute(
                delete(Contract).where(_key_filter(tenant_id, staff_id, start))
            ).rowcount or 0
        if deleted > 0:
            succeeded += 1

    failed = max(requested - succeeded, 0)
    if failed:
        logger.info(
            "Contract batch delete for %s: %d succeeded, %d failed",
            tenant_id,
            succeeded,
            failed,
        )
    return MutationCountResponse(succeeded=succeeded, failed=failed)
