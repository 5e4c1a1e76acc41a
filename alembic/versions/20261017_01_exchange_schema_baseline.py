"""Exchange schema baseline: execution ledger, control numbers and key-value store

Revision ID: 20261017_01
Revises: None
Create Date: 2026-10-17
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "20261017_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "execution",
        sa.Column("execution_id", sa.Text(), primary_key=True),
        sa.Column("workflow", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("input_payload", postgresql.JSONB(), nullable=True),
        sa.Column("output_payload", postgresql.JSONB(), nullable=True),
        sa.Column("error_code", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("error_details", postgresql.JSONB(), nullable=True),
        sa.Column("diagnostics", postgresql.JSONB(), nullable=True),
        sa.Column("started_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("ended_at_utc", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.BigInteger(), nullable=True),
        sa.CheckConstraint("status IN ('started', 'success', 'failed')", name="ck_execution_status"),
        sa.CheckConstraint("duration_ms IS NULL OR duration_ms >= 0", name="ck_execution_duration_non_negative"),
    )
    op.create_index("ix_execution_workflow_started_at_utc", "execution", ["workflow", "started_at_utc"])

    op.create_table(
        "control_number",
        sa.Column("segment", sa.Text(), nullable=False),
        sa.Column("usage_indicator_code", sa.Text(), nullable=False),
        sa.Column("sending_partner_id", sa.Text(), nullable=False),
        sa.Column("receiving_partner_id", sa.Text(), nullable=False),
        sa.Column("last_value", sa.BigInteger(), nullable=False),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint(
            "segment",
            "usage_indicator_code",
            "sending_partner_id",
            "receiving_partner_id",
            name="pk_control_number_scope",
        ),
        sa.CheckConstraint("segment IN ('ISA', 'GS')", name="ck_control_number_segment"),
        sa.CheckConstraint("last_value >= 1", name="ck_control_number_positive"),
    )

    op.create_table(
        "key_value",
        sa.Column("keyspace", sa.Text(), nullable=False),
        sa.Column("record_key", sa.Text(), nullable=False),
        sa.Column("value", postgresql.JSONB(), nullable=False),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("keyspace", "record_key", name="pk_key_value"),
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("key_value")
    op.drop_table("control_number")
    op.drop_index("ix_execution_workflow_started_at_utc", table_name="execution")
    op.drop_table("execution")
