"""initial gallery schema

Revision ID: 5c1e0a7d92b4
Revises:
Create Date: 2026-10-19 09:12:41.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0a7d92b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

artwork_type = sa.Enum(
    "Painting", "Drawing", "Sculpture", "Architecture", "Photograph", name="artwork_type"
)
image_format = sa.Enum("png", "jpg", "webp", name="image_format")
reaction_kind = sa.Enum("Like", "Perplexed", name="reaction_kind")


def upgrade() -> None:
    """Create users, relations, artworks and feedback tables."""
    op.create_table(
        "user",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("alias", sa.String(length=15), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("created", sa.DateTime(), nullable=False),
        sa.Column("updated", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "length(alias) >= 5 AND length(alias) <= 15", name="ck_user_alias_length"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("alias"),
    )
    for table in ("follow", "ban"):
        source = "follower_id" if table == "follow" else "source_id"
        op.create_table(
            table,
            sa.Column(source, sa.String(length=36), nullable=False),
            sa.Column("target_id", sa.String(length=36), nullable=False),
            sa.Column("date", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint([source], ["user.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["target_id"], ["user.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint(source, "target_id"),
        )
        op.create_index(f"ix_{table}_target_id", table, ["target_id"])

    op.create_table(
        "artwork",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("author_id", sa.String(length=36), nullable=False),
        sa.Column("type", artwork_type, nullable=False),
        sa.Column("format", image_format, nullable=False),
        sa.Column("title", sa.String(length=250), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("created", sa.DateTime(), nullable=True),
        sa.Column("added", sa.DateTime(), nullable=False),
        sa.Column("updated", sa.DateTime(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("year BETWEEN -10000 AND 10000", name="ck_artwork_year"),
    )
    op.create_index("ix_artwork_author_added", "artwork", ["author_id", "added"])
    op.create_index("ix_artwork_deleted", "artwork", ["deleted"])

    op.create_table(
        "comment",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("artwork_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["artwork_id"], ["artwork.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comment_artwork_date", "comment", ["artwork_id", "date"])

    op.create_table(
        "reaction",
        sa.Column("artwork_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("kind", reaction_kind, nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["artwork_id"], ["artwork.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("artwork_id", "user_id"),
    )
    op.create_index("ix_reaction_artwork_id", "reaction", ["artwork_id"])


def downgrade() -> None:
    """Drop every gallery table."""
    op.drop_index("ix_reaction_artwork_id", table_name="reaction")
    op.drop_table("reaction")
    op.drop_index("ix_comment_artwork_date", table_name="comment")
    op.drop_table("comment")
    op.drop_index("ix_artwork_deleted", table_name="artwork")
    op.drop_index("ix_artwork_author_added", table_name="artwork")
    op.drop_table("artwork")
    for table in ("ban", "follow"):
        op.drop_index(f"ix_{table}_target_id", table_name=table)
        op.drop_table(table)
    op.drop_table("user")
    bind = op.get_bind()
    for enum in (reaction_kind, image_format, artwork_type):
        enum.drop(bind, checkfirst=True)
