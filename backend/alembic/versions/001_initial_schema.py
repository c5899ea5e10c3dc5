"""Initial schema - users and feedbacks tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("roll_number", sa.String(length=64), nullable=False),
        sa.Column("college_name", sa.String(length=255), nullable=False),
        sa.Column("contact_no", sa.String(length=10), nullable=False),
        sa.Column("course", sa.String(length=120), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=True),
        sa.Column("resume_path", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_roll_number"), "users", ["roll_number"], unique=True)
    op.create_index(op.f("ix_users_contact_no"), "users", ["contact_no"], unique=False)

    op.create_table(
        "feedbacks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("student_name", sa.String(length=100), nullable=False),
        sa.Column("student_email", sa.String(length=255), nullable=False),
        sa.Column("student_roll_number", sa.String(length=64), nullable=False),
        sa.Column("student_college", sa.String(length=255), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("answers", sa.JSON(), nullable=True),
        sa.Column("responses", sa.JSON(), nullable=True),
        sa.Column("submission_date", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "semester", name="uq_feedbacks_user_semester"),
    )
    op.create_index(op.f("ix_feedbacks_id"), "feedbacks", ["id"], unique=False)
    op.create_index(op.f("ix_feedbacks_user_id"), "feedbacks", ["user_id"], unique=False)
    op.create_index(op.f("ix_feedbacks_student_email"), "feedbacks", ["student_email"], unique=False)
    op.create_index(op.f("ix_feedbacks_semester"), "feedbacks", ["semester"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_feedbacks_semester"), table_name="feedbacks")
    op.drop_index(op.f("ix_feedbacks_student_email"), table_name="feedbacks")
    op.drop_index(op.f("ix_feedbacks_user_id"), table_name="feedbacks")
    op.drop_index(op.f("ix_feedbacks_id"), table_name="feedbacks")
    op.drop_table("feedbacks")
    op.drop_index(op.f("ix_users_contact_no"), table_name="users")
    op.drop_index(op.f("ix_users_roll_number"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
