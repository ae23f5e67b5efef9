"""initial debt allocation schema

Revision ID: 0f3c2a9d41b7
Revises:
Create Date: 2026-10-19 10:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0f3c2a9d41b7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "person",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("is_legal", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "project",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "unit",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "debt",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False),
        sa.Column("note", sa.String(length=4000), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"]),
        sa.ForeignKeyConstraint(["person_id"], ["person.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_debt_project_id", "debt", ["project_id"])
    op.create_index("ix_debt_person_id", "debt", ["person_id"])

    op.create_table(
        "debt_line",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("debt_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=18, scale=3), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=18, scale=0), nullable=False),
        sa.Column("note", sa.String(length=4000), nullable=True),
        sa.ForeignKeyConstraint(["debt_id"], ["debt.id"]),
        sa.ForeignKeyConstraint(["item_id"], ["item.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["unit.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("debt_id", "item_id", name="uq_debt_line_debt_item"),
    )
    op.create_index("ix_debt_line_debt_id", "debt_line", ["debt_id"])

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("from_person_id", sa.Integer(), nullable=False),
        sa.Column("to_person_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("amount_paid", sa.Numeric(precision=18, scale=0), nullable=False),
        sa.Column("payment_type", sa.Enum("cash", "check", "other", name="paymenttype"), nullable=False),
        sa.Column("transaction_type", sa.Enum("expense", "transaction", "other", name="transactiontype"), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False),
        sa.Column("note", sa.String(length=4000), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"]),
        sa.ForeignKeyConstraint(["from_person_id"], ["person.id"]),
        sa.ForeignKeyConstraint(["to_person_id"], ["person.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_transaction_code"),
    )
    op.create_index("ix_transaction_project_id", "transaction", ["project_id"])
    op.create_index("ix_transaction_from_person_id", "transaction", ["from_person_id"])
    op.create_index("ix_transaction_to_person_id", "transaction", ["to_person_id"])
    op.create_index("ix_transaction_registered_at", "transaction", ["registered_at"])

    op.create_table(
        "allocation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("debt_id", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("covered_amount", sa.Numeric(precision=18, scale=0), nullable=False),
        sa.Column("note", sa.String(length=5000), nullable=True),
        sa.ForeignKeyConstraint(["debt_id"], ["debt.id"]),
        sa.ForeignKeyConstraint(["transaction_id"], ["transaction.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("debt_id", "transaction_id", name="uq_allocation_debt_transaction"),
    )
    op.create_index("ix_allocation_debt_id", "allocation", ["debt_id"])
    op.create_index("ix_allocation_transaction_id", "allocation", ["transaction_id"])

    op.create_table(
        "debt_document",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("debt_id", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("content_type", sa.String(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["debt_id"], ["debt.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_debt_document_debt_id", "debt_document", ["debt_id"])

    op.create_table(
        "transaction_document",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("content_type", sa.String(), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["transaction_id"], ["transaction.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transaction_document_transaction_id", "transaction_document", ["transaction_id"])


def downgrade():
    op.drop_index("ix_transaction_document_transaction_id", table_name="transaction_document")
    op.drop_table("transaction_document")
    op.drop_index("ix_debt_document_debt_id", table_name="debt_document")
    op.drop_table("debt_document")
    op.drop_index("ix_allocation_transaction_id", table_name="allocation")
    op.drop_index("ix_allocation_debt_id", table_name="allocation")
    op.drop_table("allocation")
    op.drop_index("ix_transaction_registered_at", table_name="transaction")
    op.drop_index("ix_transaction_to_person_id", table_name="transaction")
    op.drop_index("ix_transaction_from_person_id", table_name="transaction")
    op.drop_index("ix_transaction_project_id", table_name="transaction")
    op.drop_table("transaction")
    sa.Enum(name="transactiontype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="paymenttype").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_debt_line_debt_id", table_name="debt_line")
    op.drop_table("debt_line")
    op.drop_index("ix_debt_person_id", table_name="debt")
    op.drop_index("ix_debt_project_id", table_name="debt")
    op.drop_table("debt")
    op.drop_table("unit")
    op.drop_table("item")
    op.drop_table("project")
    op.drop_table("person")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
