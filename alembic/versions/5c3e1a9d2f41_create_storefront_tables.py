"""create storefront tables

Revision ID: 5c3e1a9d2f41
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c3e1a9d2f41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="user"),
        sa.Column("can_login", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    op.create_table(
        "cart",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_cart_user_id", "cart", ["user_id"], unique=True)

    op.create_table(
        "cartitem",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cart_id", sa.Integer(), sa.ForeignKey("cart.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_cartitem_cart_id", "cartitem", ["cart_id"])

    op.create_table(
        "order",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("order_number", sa.String(), nullable=False),
        sa.Column("shipping_address", sa.JSON(), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False),
        sa.Column("order_status", sa.String(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processing_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_order_order_number", "order", ["order_number"], unique=True)
    op.create_index("ix_order_user_id", "order", ["user_id"])
    op.create_index("ix_order_order_status", "order", ["order_status"])
    op.create_index("ix_order_created_at", "order", ["created_at"])

    op.create_table(
        "orderitem",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
    )
    op.create_index("ix_orderitem_order_id", "orderitem", ["order_id"])

    op.create_table(
        "order_event",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False, server_default="system"),
    )
    # indexes for fast timeline queries
    op.create_index("ix_order_event_order_id", "order_event", ["order_id"])
    op.create_index("ix_order_event_event_type", "order_event", ["event_type"])

    op.create_table(
        "reservation_intent",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("order.id"), nullable=True),
        sa.Column("failure_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_reservation_intent_user_id", "reservation_intent", ["user_id"])
    op.create_index("ix_reservation_intent_status", "reservation_intent", ["status"])
    op.create_index("ix_reservation_intent_created_at", "reservation_intent", ["created_at"])

    op.create_table(
        "reservation_line",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("intent_id", sa.String(), sa.ForeignKey("reservation_intent.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reserved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("released", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_reservation_line_intent_id", "reservation_line", ["intent_id"])


def downgrade():
    op.drop_index("ix_reservation_line_intent_id", table_name="reservation_line")
    op.drop_table("reservation_line")
    op.drop_index("ix_reservation_intent_created_at", table_name="reservation_intent")
    op.drop_index("ix_reservation_intent_status", table_name="reservation_intent")
    op.drop_index("ix_reservation_intent_user_id", table_name="reservation_intent")
    op.drop_table("reservation_intent")
    op.drop_index("ix_order_event_event_type", table_name="order_event")
    op.drop_index("ix_order_event_order_id", table_name="order_event")
    op.drop_table("order_event")
    op.drop_index("ix_orderitem_order_id", table_name="orderitem")
    op.drop_table("orderitem")
    op.drop_index("ix_order_created_at", table_name="order")
    op.drop_index("ix_order_order_status", table_name="order")
    op.drop_index("ix_order_user_id", table_name="order")
    op.drop_index("ix_order_order_number", table_name="order")
    op.drop_table("order")
    op.drop_index("ix_cartitem_cart_id", table_name="cartitem")
    op.drop_table("cartitem")
    op.drop_index("ix_cart_user_id", table_name="cart")
    op.drop_table("cart")
    op.drop_table("product")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
