"""Initial schema: scheduling_configs, interview_reservations, interview_slot_blocks.

Revision ID: 001_interview_agenda
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_interview_agenda"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "scheduling_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("workspace_id", sa.String(), nullable=False),
        sa.Column("interview_timezone", sa.String(), nullable=True),
        sa.Column("interview_slot_minutes", sa.Integer(), nullable=True),
        sa.Column("interview_weekly_availability", sa.String(), nullable=True),
        sa.Column("interview_exceptions", sa.String(), nullable=True),
        sa.Column("interview_locations", sa.String(), nullable=True),
        sa.Column("default_interview_location", sa.String(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_scheduling_configs_workspace_id"), "scheduling_configs", ["workspace_id"], unique=True)

    op.create_table(
        "interview_reservations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("conversation_id", sa.String(), nullable=False),
        sa.Column("contact_id", sa.String(), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("timezone", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="PENDING"),
        sa.Column("active_key", sa.String(), nullable=True, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "start_at",
            "location",
            "active_key",
            name="uq_interview_reservations_start_at_location_active_key",
        ),
    )
    op.create_index(op.f("ix_interview_reservations_conversation_id"), "interview_reservations", ["conversation_id"], unique=False)
    op.create_index(op.f("ix_interview_reservations_contact_id"), "interview_reservations", ["contact_id"], unique=False)
    op.create_index(op.f("ix_interview_reservations_start_at"), "interview_reservations", ["start_at"], unique=False)
    op.create_index(
        "uq_interview_reservations_active_conversation",
        "interview_reservations",
        ["conversation_id"],
        unique=True,
        postgresql_where=sa.text("active_key = 'ACTIVE'"),
        sqlite_where=sa.text("active_key = 'ACTIVE'"),
    )

    op.create_table(
        "interview_slot_blocks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("timezone", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("tag", sa.String(), nullable=True),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("start_at", "location", name="uq_interview_slot_blocks_start_at_location"),
    )
    op.create_index(op.f("ix_interview_slot_blocks_start_at"), "interview_slot_blocks", ["start_at"], unique=False)
    op.create_index(op.f("ix_interview_slot_blocks_tag"), "interview_slot_blocks", ["tag"], unique=False)
    op.create_index(op.f("ix_interview_slot_blocks_archived_at"), "interview_slot_blocks", ["archived_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_interview_slot_blocks_archived_at"), table_name="interview_slot_blocks")
    op.drop_index(op.f("ix_interview_slot_blocks_tag"), table_name="interview_slot_blocks")
    op.drop_index(op.f("ix_interview_slot_blocks_start_at"), table_name="interview_slot_blocks")
    op.drop_table("interview_slot_blocks")
    op.drop_index("uq_interview_reservations_active_conversation", table_name="interview_reservations")
    op.drop_index(op.f("ix_interview_reservations_start_at"), table_name="interview_reservations")
    op.drop_index(op.f("ix_interview_reservations_contact_id"), table_name="interview_reservations")
    op.drop_index(op.f("ix_interview_reservations_conversation_id"), table_name="interview_reservations")
    op.drop_table("interview_reservations")
    op.drop_index(op.f("ix_scheduling_configs_workspace_id"), table_name="scheduling_configs")
    op.drop_table("scheduling_configs")
