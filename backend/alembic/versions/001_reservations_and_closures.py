"""reservations, closures and date_notices

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "reservations",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("cancel_token", sa.String(64), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("start_ts", sa.DateTime(), nullable=False),
        sa.Column("end_ts", sa.DateTime(), nullable=False),
        sa.Column("first_name", sa.String(128), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("guests", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="confirmed"),
        sa.Column("is_walk_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("cancel_token", name="uq_reservations_cancel_token"),
        sa.CheckConstraint("guests >= 1", name="ck_reservations_guests_positive"),
        sa.CheckConstraint("end_ts > start_ts", name="ck_reservations_interval"),
    )
    op.create_index("ix_reservations_date_time", "reservations", ["date", "time"])
    op.create_index("ix_reservations_start_ts", "reservations", ["start_ts"])
    op.create_index("ix_reservations_end_ts", "reservations", ["end_ts"])
    op.create_index("ix_reservations_email", "reservations", ["email"])

    op.create_table(
        "closures",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("start_ts", sa.DateTime(), nullable=False),
        sa.Column("end_ts", sa.DateTime(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.CheckConstraint("end_ts > start_ts", name="ck_closures_interval"),
    )
    op.create_index("ix_closures_start_ts", "closures", ["start_ts"])
    op.create_index("ix_closures_end_ts", "closures", ["end_ts"])

    op.create_table(
        "date_notices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("date", name="uq_date_notices_date"),
    )


def downgrade() -> None:
    op.drop_table("date_notices")
    op.drop_index("ix_closures_end_ts", table_name="closures")
    op.drop_index("ix_closures_start_ts", table_name="closures")
    op.drop_table("closures")
    op.drop_index("ix_reservations_email", table_name="reservations")
    op.drop_index("ix_reservations_end_ts", table_name="reservations")
    op.drop_index("ix_reservations_start_ts", table_name="reservations")
    op.drop_index("ix_reservations_date_time", table_name="reservations")
    op.drop_table("reservations")
