from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.schemas.codes import CodeResponse
from app.security.auth import get_current_user
from app.services.code_service import list_codes
from db import get_db
from models import Staff

router = APIRouter(tags=["codes"])


@router.get(
    "/codes",
    response_model=list[CodeResponse],
)
def list_group_codes(
    group_code: str = Query(..., min_length=1),
    user: Staff = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[CodeResponse]:
    return list_codes(db, user.tenant_id, group_code.strip())
