from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.codes import CodeEntry

LEAVE_TYPE_GROUP = "GNT_CD"
APPROVAL_STATUS_GROUP = "STATUS_CD"


def list_codes(db: Session, tenant_id: str, group_code: str) -> list[CodeEntry]:
    stmt = (
        select(CodeEntry)
        .where(
            CodeEntry.tenant_id == tenant_id,
            CodeEntry.group_code == group_code,
            CodeEntry.is_active.is_(True),
        )
        .order_by(CodeEntry.sort_order.asc().nulls_last(), CodeEntry.code)
    )
    return list(db.scalars(stmt).all())


def code_names(db: Session, tenant_id: str, group_code: str) -> dict[str, str]:
    rows = db.execute(
        select(CodeEntry.code, CodeEntry.name).where(
            CodeEntry.tenant_id == tenant_id,
            CodeEntry.group_code == group_code,
            CodeEntry.is_active.is_(True),
        )
    ).all()
    return {code: name for code, name in rows}
