"""posts and tenant profile

Revision ID: 9d4c2a7e51f0
Revises: 3b8e1f0c6a21
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "9d4c2a7e51f0"
down_revision = "3b8e1f0c6a21"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("tenants") as batch_op:
        batch_op.add_column(sa.Column("website", sa.String(length=1024), nullable=True))
        batch_op.add_column(sa.Column("industry", sa.String(length=255), nullable=True))
        batch_op.add_column(sa.Column("description", sa.Text(), nullable=True))

    op.create_table(
        "posts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("media_urls", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("platform", sa.String(length=32), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("ai_generated", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("ai_model", sa.String(length=64), nullable=True),
        sa.Column("user_approved", sa.Boolean(), nullable=True),
        sa.Column("user_modifications", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_posts_tenant_id"), "posts", ["tenant_id"], unique=False)
    op.create_index("ix_posts_tenant_created_at", "posts", ["tenant_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_posts_tenant_created_at", table_name="posts")
    op.drop_index(op.f("ix_posts_tenant_id"), table_name="posts")
    op.drop_table("posts")
    with op.batch_alter_table("tenants") as batch_op:
        batch_op.drop_column("description")
        batch_op.drop_column("industry")
        batch_op.drop_column("website")
