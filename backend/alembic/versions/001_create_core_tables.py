"""Create users, scientist, bugs, scientist_bugs and user_sessions

Revision ID: 001
Revises: None
Create Date: 2024-05-02 00:00:00.000000+00:00

Every foreign key cascades on delete: removing a User removes its Scientist
and sessions; removing a Scientist or Bug removes its assignments.

Rollback: downgrade() drops all five tables (all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "scientist",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_scientist"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_scientist_user_id", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", name="uq_scientist_user_id"),
    )
    op.create_index("ix_scientist_email", "scientist", ["email"], unique=True)

    op.create_table(
        "bugs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("strength", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_bugs"),
    )

    op.create_table(
        "scientist_bugs",
        sa.Column("scientist_id", sa.Integer(), nullable=False),
        sa.Column("bug_id", sa.Integer(), nullable=False),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("scientist_id", "bug_id", name="pk_scientist_bugs"),
        sa.ForeignKeyConstraint(
            ["scientist_id"], ["scientist.id"],
            name="fk_scientist_bugs_scientist_id", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["bug_id"], ["bugs.id"],
            name="fk_scientist_bugs_bug_id", ondelete="CASCADE",
        ),
    )
    op.create_index("ix_scientist_bugs_bug_id", "scientist_bugs", ["bug_id"])

    op.create_table(
        "user_sessions",
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("token", name="pk_user_sessions"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_user_sessions_user_id", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_sessions_user_id", table_name="user_sessions")
    op.drop_table("user_sessions")
    op.drop_index("ix_scientist_bugs_bug_id", table_name="scientist_bugs")
    op.drop_table("scientist_bugs")
    op.drop_table("bugs")
    op.drop_index("ix_scientist_email", table_name="scientist")
    op.drop_table("scientist")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
