"""create option table

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa


revision: str = "202610190001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    option_table = op.create_table(
        "option",
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )

    now = datetime.now(timezone.utc)
    op.bulk_insert(
        option_table,
        [
            {"key": "CUSTOMER_ID_COUNTER", "value": {"counter": 100001}, "updated_at": now},
            {"key": "CUSTOMER_ID_SCHEMA", "value": {"schema": "C%YYYY%COUNTER"}, "updated_at": now},
            {"key": "QUOTE_ID_COUNTER", "value": {"counter": 10001}, "updated_at": now},
            {"key": "QUOTE_ID_SCHEMA", "value": {"schema": "Q%YYYY%MM%COUNTER"}, "updated_at": now},
        ],
    )


def downgrade() -> None:
    op.drop_table("option")
