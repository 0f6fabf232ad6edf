"""initial forum schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Users, topics, posts, topic votes, post reactions, user reports, blocked
users and per-user view state.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("ADMIN", "USER", name="userrole")
vote_type = sa.Enum("UP", "DOWN", name="votetype")
reaction_type = sa.Enum("LIKE", "DISLIKE", name="reactiontype")
report_reason = sa.Enum(
    "SPAM",
    "HARASSMENT",
    "INAPPROPRIATE_CONTENT",
    "OFFENSIVE_LANGUAGE",
    "OTHER",
    name="reportreason",
)
report_status = sa.Enum("PENDING", "REVIEWED", "DISMISSED", name="reportstatus")
report_content_type = sa.Enum("POST", "REPLY", "TOPIC", name="reportcontenttype")
report_action = sa.Enum(
    "WARNING", "TEMPORARY_BAN", "PERMANENT_BAN", "DISMISSED", name="reportaction"
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "topics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.Column("reply_count", sa.Integer(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column(
            "deleted_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True
        ),
    )
    op.create_index("ix_topics_id", "topics", ["id"])
    op.create_index("ix_topics_category", "topics", ["category"])
    op.create_index("ix_topics_updated", "topics", ["updated_at"])
    op.create_index("ix_topics_deleted", "topics", ["deleted_at"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "topic_id", sa.Integer(), sa.ForeignKey("topics.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "parent_id", sa.Integer(), sa.ForeignKey("posts.id"), nullable=True
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False),
        sa.Column("dislikes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_posts_id", "posts", ["id"])
    op.create_index("ix_posts_topic", "posts", ["topic_id"])
    op.create_index("ix_posts_parent", "posts", ["parent_id"])
    op.create_index("ix_posts_user", "posts", ["user_id"])

    op.create_table(
        "topic_votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "topic_id", sa.Integer(), sa.ForeignKey("topics.id"), nullable=False
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vote_type", vote_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", "topic_id", name="uq_topic_vote_user_topic"),
    )
    op.create_index("ix_topic_votes_id", "topic_votes", ["id"])
    op.create_index("ix_topic_votes_topic", "topic_votes", ["topic_id"])

    op.create_table(
        "post_reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reaction_type", reaction_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", "post_id", name="uq_post_reaction_user_post"),
    )
    op.create_index("ix_post_reactions_id", "post_reactions", ["id"])

    op.create_table(
        "user_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reporter_username", sa.String(50), nullable=False),
        sa.Column("reported_username", sa.String(50), nullable=False),
        sa.Column("reason", report_reason, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=True),
        sa.Column("topic_id", sa.Integer(), nullable=True),
        sa.Column("content_type", report_content_type, nullable=False),
        sa.Column("reply_content", sa.Text(), nullable=True),
        sa.Column("status", report_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("reviewed_by", sa.String(50), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("action", report_action, nullable=True),
    )
    op.create_index("ix_user_reports_id", "user_reports", ["id"])
    op.create_index(
        "ix_user_reports_pair",
        "user_reports",
        ["reporter_username", "reported_username"],
    )
    op.create_index("ix_user_reports_reported", "user_reports", ["reported_username"])
    op.create_index("ix_user_reports_status", "user_reports", ["status"])

    op.create_table(
        "blocked_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("blocked_by", sa.String(50), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("blocked_at", sa.DateTime(), nullable=True),
        sa.Column("topics_created", sa.Integer(), nullable=False),
        sa.Column("posts_created", sa.Integer(), nullable=False),
        sa.Column("reports_received", sa.Integer(), nullable=False),
    )
    op.create_index("ix_blocked_users_id", "blocked_users", ["id"])
    op.create_index(
        "ix_blocked_users_username", "blocked_users", ["username"], unique=True
    )

    op.create_table(
        "user_view_states",
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True
        ),
        sa.Column("current_section", sa.String(50), nullable=False),
        sa.Column("active_topic_id", sa.Integer(), nullable=True),
        sa.Column("active_post_id", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("user_view_states")
    op.drop_table("blocked_users")
    op.drop_table("user_reports")
    op.drop_table("post_reactions")
    op.drop_table("topic_votes")
    op.drop_table("posts")
    op.drop_table("topics")
    op.drop_table("users")
