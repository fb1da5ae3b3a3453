"""add_tag_name_key

Revision ID: 7c2e4b9f1a30
Revises: 0f3c9a1d2b7e
Create Date: 2026-10-19 14:00:00.000000

Replaces the unique index on (user_id, lower(name)) with one on a stored,
case-folded name_key. SQLite's lower() only folds ASCII, so "Ärger" and "ärger"
could both be created there.

Migration strategy:
- Backfill name_key with str.casefold() of the stripped name
- Tags whose keys now collide are merged into the oldest one; its bookmark
  links are kept and the duplicates' links are moved onto it
"""
from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7c2e4b9f1a30"
down_revision: str | Sequence[str] | None = "0f3c9a1d2b7e"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def merge_tag(connection: sa.Connection, keep_id: object, duplicate_id: object) -> None:
    """Move a duplicate tag's bookmark links onto the kept tag, then delete it."""
    connection.execute(
        sa.text(
            "INSERT INTO bookmark_tags (bookmark_id, tag_id) "
            "SELECT bookmark_id, :keep_id FROM bookmark_tags "
            "WHERE tag_id = :duplicate_id AND bookmark_id NOT IN "
            "(SELECT bookmark_id FROM bookmark_tags WHERE tag_id = :keep_id)",
        ),
        {"keep_id": keep_id, "duplicate_id": duplicate_id},
    )
    connection.execute(
        sa.text("DELETE FROM bookmark_tags WHERE tag_id = :duplicate_id"),
        {"duplicate_id": duplicate_id},
    )
    connection.execute(
        sa.text("DELETE FROM tags WHERE id = :duplicate_id"),
        {"duplicate_id": duplicate_id},
    )


def upgrade() -> None:
    """Add tags.name_key, backfill it and make it the uniqueness key."""
    op.drop_index("uq_tags_user_id_lower_name", table_name="tags")
    op.add_column("tags", sa.Column("name_key", sa.String(length=300), nullable=True))

    connection = op.get_bind()
    rows = connection.execute(
        sa.text("SELECT id, user_id, name FROM tags ORDER BY created_at, id"),
    ).all()

    kept: dict[tuple[object, str], object] = {}
    for tag_id, user_id, name in rows:
        key = name.strip().casefold()
        keep_id = kept.get((user_id, key))
        if keep_id is None:
            kept[(user_id, key)] = tag_id
            connection.execute(
                sa.text("UPDATE tags SET name_key = :key WHERE id = :id"),
                {"key": key, "id": tag_id},
            )
        else:
            merge_tag(connection, keep_id, tag_id)

    with op.batch_alter_table("tags") as batch_op:
        batch_op.alter_column(
            "name_key", existing_type=sa.String(length=300), nullable=False,
        )
    op.create_index(
        "uq_tags_user_id_name_key", "tags", ["user_id", "name_key"], unique=True,
    )


def downgrade() -> None:
    """Drop tags.name_key and restore the lower(name) unique index."""
    op.drop_index("uq_tags_user_id_name_key", table_name="tags")
    with op.batch_alter_table("tags") as batch_op:
        batch_op.drop_column("name_key")
    op.create_index(
        "uq_tags_user_id_lower_name",
        "tags",
        ["user_id", sa.text("lower(name)")],
        unique=True,
    )
