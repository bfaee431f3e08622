"""Create SchoolMap tables

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Creates the seven tables of the school community schema.
How:   Unique constraints back the registration upserts:
       schools.external_id, (school_departments.school_id, name),
       users.idname, keywords.word and the keyword_users composite key.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "schools",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False, comment="Display name"),
        sa.Column(
            "external_id",
            sa.String(50),
            nullable=True,
            comment="NEIS office code + school code",
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_schools"),
        sa.UniqueConstraint("external_id", name="uq_schools_external_id"),
    )

    op.create_table(
        "school_departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("external_id", sa.String(50), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_school_departments"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], name="fk_departments_school"),
        sa.UniqueConstraint("school_id", "name", name="uq_school_departments_school_name"),
    )
    op.create_index("ix_school_departments_school_id", "school_departments", ["school_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("idname", sa.String(50), nullable=False, comment="Login handle"),
        sa.Column("name", sa.String(50), nullable=False, comment="Display name"),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("grade", sa.Integer(), nullable=True),
        sa.Column("class_num", sa.Integer(), nullable=True),
        sa.Column(
            "profile_photo",
            sa.String(255),
            nullable=True,
            comment="Path or URL of the profile picture",
        ),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], name="fk_users_school"),
        sa.ForeignKeyConstraint(
            ["department_id"], ["school_departments.id"], name="fk_users_department"
        ),
        sa.UniqueConstraint("idname", name="uq_users_idname"),
    )
    op.create_index("ix_users_school_id", "users", ["school_id"])

    op.create_table(
        "maps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_maps"),
    )

    op.create_table(
        "map_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("map_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_map_comments"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_map_comments_user"),
        sa.ForeignKeyConstraint(["map_id"], ["maps.id"], name="fk_map_comments_map"),
    )
    op.create_index("ix_map_comments_map_id", "map_comments", ["map_id"])

    op.create_table(
        "keywords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("word", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_keywords"),
        sa.UniqueConstraint("word", name="uq_keywords_word"),
    )

    op.create_table(
        "keyword_users",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("keyword_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "keyword_id", name="pk_keyword_users"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_keyword_users_user"),
        sa.ForeignKeyConstraint(["keyword_id"], ["keywords.id"], name="fk_keyword_users_keyword"),
    )


def downgrade() -> None:
    op.drop_table("keyword_users")
    op.drop_table("keywords")
    op.drop_index("ix_map_comments_map_id", table_name="map_comments")
    op.drop_table("map_comments")
    op.drop_table("maps")
    op.drop_index("ix_users_school_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_school_departments_school_id", table_name="school_departments")
    op.drop_table("school_departments")
    op.drop_table("schools")
