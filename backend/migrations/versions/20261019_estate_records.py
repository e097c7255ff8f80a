"""Record store collections and key-value flags

Revision ID: 20261019_estate_records
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_estate_records"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "estate_records",
        sa.Column("collection", sa.String(64), nullable=False),
        sa.Column("record_key", sa.String(128), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("collection", "record_key"),
    )

    with op.batch_alter_table("estate_records", schema=None) as batch_op:
        batch_op.create_index("ix_estate_records_collection_seq", ["collection", "seq"], unique=False)


def downgrade():
    with op.batch_alter_table("estate_records", schema=None) as batch_op:
        batch_op.drop_index("ix_estate_records_collection_seq")

    op.drop_table("estate_records")
