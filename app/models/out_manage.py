from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
SurrogateId = BigInteger().with_variant(Integer, "sqlite")


class Contract(Base):
    __tablename__ = "out_manage"

    tenant_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    staff_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    period_start: Mapped[str] = mapped_column(String(8), primary_key=True)
    period_end: Mapped[str] = mapped_column(String(8), nullable=False)
    total_entitlement: Mapped[Decimal | None] = mapped_column(Numeric(7, 2))
    service_entitlement: Mapped[Decimal | None] = mapped_column(Numeric(7, 2))
    note: Mapped[str | None] = mapped_column(Text)
    last_editor_id: Mapped[str | None] = mapped_column(String(50))
    last_edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class UsageEntry(Base):
    __tablename__ = "out_manage_time"
    __table_args__ = (
        Index(
            "ix_out_manage_time_span",
            "tenant_id",
            "staff_id",
            "period_start",
            "period_end",
        ),
    )

    id: Mapped[int] = mapped_column(SurrogateId, primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(String(20), nullable=False)
    staff_id: Mapped[str] = mapped_column(String(50), nullable=False)
    leave_type_code: Mapped[str | None] = mapped_column(String(20))
    requested_on: Mapped[str | None] = mapped_column(String(8))
    approval_status_code: Mapped[str | None] = mapped_column(String(20))
    period_start: Mapped[str] = mapped_column(String(8), nullable=False)
    period_end: Mapped[str] = mapped_column(String(8), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(7, 2), default=Decimal("0"), nullable=False
    )
    note: Mapped[str | None] = mapped_column(Text)
    last_editor_id: Mapped[str | None] = mapped_column(String(50))
    last_edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
