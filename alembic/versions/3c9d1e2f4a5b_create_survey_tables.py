"""create_survey_tables

Revision ID: 3c9d1e2f4a5b
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c9d1e2f4a5b"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "surveys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(1000), nullable=False),
        sa.Column("slug", sa.String(1000), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image", sa.String(255), nullable=True),
        sa.Column("status", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("expire_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_surveys_id", "surveys", ["id"])
    op.create_index("ix_surveys_user_id", "surveys", ["user_id"])
    op.create_index("ix_surveys_slug", "surveys", ["slug"], unique=True)

    op.create_table(
        "survey_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "survey_id", sa.Integer(), sa.ForeignKey("surveys.id"), nullable=False
        ),
        sa.Column("type", sa.String(45), nullable=False),
        sa.Column("question", sa.String(2000), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("data", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_survey_questions_id", "survey_questions", ["id"])
    op.create_index("ix_survey_questions_survey_id", "survey_questions", ["survey_id"])

    op.create_table(
        "survey_answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "survey_id", sa.Integer(), sa.ForeignKey("surveys.id"), nullable=False
        ),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_survey_answers_id", "survey_answers", ["id"])
    op.create_index("ix_survey_answers_survey_id", "survey_answers", ["survey_id"])

    op.create_table(
        "survey_question_answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "survey_question_id",
            sa.Integer(),
            sa.ForeignKey("survey_questions.id"),
            nullable=False,
        ),
        sa.Column(
            "survey_answer_id",
            sa.Integer(),
            sa.ForeignKey("survey_answers.id"),
            nullable=False,
        ),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )
    op.create_index("ix_survey_question_answers_id", "survey_question_answers", ["id"])
    op.create_index(
        "ix_survey_question_answers_survey_question_id",
        "survey_question_answers",
        ["survey_question_id"],
    )
    op.create_index(
        "ix_survey_question_answers_survey_answer_id",
        "survey_question_answers",
        ["survey_answer_id"],
    )


def downgrade() -> None:
    op.drop_table("survey_question_answers")
    op.drop_table("survey_answers")
    op.drop_table("survey_questions")
    op.drop_table("surveys")
    op.drop_table("users")
