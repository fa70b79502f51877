"""out-manage ledger, staff directory, codes and system log

Revision ID: 5a1c7e2d9b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5a1c7e2d9b40"
down_revision = None
branch_labels = None
depends_on = None


def _surrogate_id() -> sa.types.TypeEngine:
    return sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "staff",
        sa.Column("tenant_id", sa.String(length=20), nullable=False),
        sa.Column("staff_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("tenant_id", "staff_id"),
    )
    op.create_table(
        "codes",
        sa.Column("tenant_id", sa.String(length=20), nullable=False),
        sa.Column("group_code", sa.String(length=50), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("english_name", sa.String(length=100), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.PrimaryKeyConstraint("tenant_id", "group_code", "code"),
    )
    op.create_table(
        "out_manage",
        sa.Column("tenant_id", sa.String(length=20), nullable=False),
        sa.Column("staff_id", sa.String(length=50), nullable=False),
        sa.Column("period_start", sa.String(length=8), nullable=False),
        sa.Column("period_end", sa.String(length=8), nullable=False),
        sa.Column("total_entitlement", sa.Numeric(7, 2), nullable=True),
        sa.Column("service_entitlement", sa.Numeric(7, 2), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("last_editor_id", sa.String(length=50), nullable=True),
        sa.Column("last_edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("tenant_id", "staff_id", "period_start"),
    )
    op.create_table(
        "out_manage_time",
        sa.Column("id", _surrogate_id(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=20), nullable=False),
        sa.Column("staff_id", sa.String(length=50), nullable=False),
        sa.Column("leave_type_code", sa.String(length=20), nullable=True),
        sa.Column("requested_on", sa.String(length=8), nullable=True),
        sa.Column("approval_status_code", sa.String(length=20), nullable=True),
        sa.Column("period_start", sa.String(length=8), nullable=False),
        sa.Column("period_end", sa.String(length=8), nullable=False),
        sa.Column(
            "quantity",
            sa.Numeric(7, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("last_editor_id", sa.String(length=50), nullable=True),
        sa.Column("last_edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_out_manage_time_span",
        "out_manage_time",
        ["tenant_id", "staff_id", "period_start", "period_end"],
    )
    op.create_table(
        "system_log",
        sa.Column("id", _surrogate_id(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.String(length=50), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("request_url", sa.String(length=500), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("system_log")
    op.drop_index("ix_out_manage_time_span", table_name="out_manage_time")
    op.drop_table("out_manage_time")
    op.drop_table("out_manage")
    op.drop_table("codes")
    op.drop_table("staff")
