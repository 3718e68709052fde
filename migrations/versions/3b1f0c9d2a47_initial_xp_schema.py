# File: migrations/versions/3b1f0c9d2a47_initial_xp_schema.py

"""Initial schema: users, follows, progress records, ranking snapshots

Revision ID: 3b1f0c9d2a47
Revises:
Create Date: 2026-10-18 10:12:31.204117
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3b1f0c9d2a47"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=150), nullable=False, unique=True),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("theme", sa.String(length=32), nullable=False, server_default="default"),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_xp", sa.JSON(), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("country", sa.String(length=80), nullable=False, server_default="Unknown"),
        sa.Column("continent", sa.String(length=40), nullable=False, server_default="Unknown"),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("location_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "follows",
        sa.Column("follower_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("followed_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "progress_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("workout_name", sa.String(length=80), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unit", sa.String(length=16), nullable=False),
        sa.Column("intensity", sa.String(length=40), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("is_additional", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("user_id", "workout_name", "date", name="uq_progress_user_workout_date"),
    )
    op.create_index("ix_progress_records_user_id", "progress_records", ["user_id"])
    op.create_index("ix_progress_records_date", "progress_records", ["date"])

    op.create_table(
        "ranking_snapshots",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("theme", sa.String(length=32), nullable=False, server_default="default"),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("country", sa.String(length=80), nullable=False, server_default="Unknown"),
        sa.Column("continent", sa.String(length=40), nullable=False, server_default="Unknown"),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_ranking_snapshots_total_xp", "ranking_snapshots", ["total_xp"])
    op.create_index("ix_ranking_snapshots_country", "ranking_snapshots", ["country"])
    op.create_index("ix_ranking_snapshots_continent", "ranking_snapshots", ["continent"])


def downgrade():
    op.drop_index("ix_ranking_snapshots_continent", table_name="ranking_snapshots")
    op.drop_index("ix_ranking_snapshots_country", table_name="ranking_snapshots")
    op.drop_index("ix_ranking_snapshots_total_xp", table_name="ranking_snapshots")
    op.drop_table("ranking_snapshots")
    op.drop_index("ix_progress_records_date", table_name="progress_records")
    op.drop_index("ix_progress_records_user_id", table_name="progress_records")
    op.drop_table("progress_records")
    op.drop_table("follows")
    op.drop_table("user")
