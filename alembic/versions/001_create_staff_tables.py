"""Create staff, users, staff_groups and locations tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create staff tables and their lookups."""
    op.create_table(
        "staff_groups",
        sa.Column("staff_group_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("staff_group_name", sa.String(32), nullable=False),
    )

    op.create_table(
        "locations",
        sa.Column("location_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("location_name", sa.String(32), nullable=False),
        sa.Column("location_email", sa.String(96), nullable=True),
    )

    op.create_table(
        "staffs",
        sa.Column("staff_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("staff_name", sa.String(32), nullable=False, server_default=sa.text("''")),
        sa.Column("staff_email", sa.String(96), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "staff_group_id",
            sa.Integer(),
            sa.ForeignKey("staff_groups.staff_group_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "staff_location_id",
            sa.Integer(),
            sa.ForeignKey("locations.location_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("timezone", sa.String(32), nullable=False, server_default=sa.text("''")),
        sa.Column("language_id", sa.String(32), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "date_added",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("staff_status", sa.String(1), nullable=False, server_default=sa.text("'0'")),
    )

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(32), nullable=False),
        sa.Column("password", sa.String(40), nullable=False),
        sa.Column("salt", sa.String(9), nullable=False),
    )

    op.create_index("ix_staffs_staff_email", "staffs", ["staff_email"], unique=False)
    op.create_index("ix_staffs_staff_group_id", "staffs", ["staff_group_id"], unique=False)
    op.create_index("ix_staffs_staff_location_id", "staffs", ["staff_location_id"], unique=False)
    op.create_index("ix_staffs_staff_status", "staffs", ["staff_status"], unique=False)
    op.create_index("ix_users_staff_id", "users", ["staff_id"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)


def downgrade() -> None:
    """Drop staff tables."""
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_staff_id", table_name="users")
    op.drop_index("ix_staffs_staff_status", table_name="staffs")
    op.drop_index("ix_staffs_staff_location_id", table_name="staffs")
    op.drop_index("ix_staffs_staff_group_id", table_name="staffs")
    op.drop_index("ix_staffs_staff_email", table_name="staffs")
    op.drop_table("users")
    op.drop_table("staffs")
    op.drop_table("locations")
    op.drop_table("staff_groups")
