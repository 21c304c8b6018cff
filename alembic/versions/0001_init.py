"""init forum tables
Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "users",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("username", sa.String(length=64), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="MEMBER"),
    )

    op.create_table(
        "categories",
        sa.Column("category_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("name", sa.String(length=36), nullable=False),
        sa.Column("alias", sa.String(length=128), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("topics_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_topic_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "topics",
        sa.Column("topic_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("short_id", sa.String(length=255), nullable=True, unique=True),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_topics_created_at", "topics", [sa.text("created_at DESC")])
    op.create_index("ix_topics_user_created", "topics", ["user_id", sa.text("created_at DESC")])
    op.create_index("ix_topics_category_created", "topics", ["category_id", sa.text("created_at DESC")])
    op.create_index("ix_topics_score_created", "topics", [sa.text("score DESC"), sa.text("created_at DESC")])

    op.create_table(
        "statistics",
        sa.Column("statistic_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("name", sa.String(length=36), nullable=False, unique=True),
        sa.Column("count", sa.BigInteger(), nullable=False, server_default="0"),
    )

def downgrade():
    op.drop_table("statistics")
    op.drop_index("ix_topics_score_created", table_name="topics")
    op.drop_index("ix_topics_category_created", table_name="topics")
    op.drop_index("ix_topics_user_created", table_name="topics")
    op.drop_index("ix_topics_created_at", table_name="topics")
    op.drop_table("topics")
    op.drop_table("categories")
    op.drop_table("users")
