"""create order ingestion schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

ORDER_STATUSES = (
    "ACCEPTED",
    "REJECTED",
    "REJECTED_CUSTOMER",
    "REJECTED_RESTAURANT",
    "CANCELLED_CUSTOMER",
    "CANCELLED_RESTAURANT",
    "COMPLETED",
)
DELIVERY_TYPES = ("DELIVERY", "COLLECTION", "PICKUP", "UNKNOWN")


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "platforms",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("platform_id", sa.Integer(), nullable=False),
        sa.Column(
            "external_id",
            sa.String(length=100),
            nullable=True,
            comment="Platform-side restaurant identifier, when exported",
        ),
        _created_at(),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("platform_id", "name", name="uq_restaurants_platform_name"),
    )
    op.create_index(
        "uq_restaurants_platform_external_id",
        "restaurants",
        ["platform_id", "external_id"],
        unique=True,
        postgresql_where=sa.text("external_id IS NOT NULL"),
    )
    op.create_index("ix_restaurants_platform_id", "restaurants", ["platform_id"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("platform_id", sa.Integer(), nullable=False),
        sa.Column("platform_order_id", sa.String(length=100), nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("order_status", sa.String(length=32), nullable=False),
        sa.Column("delivery_type", sa.String(length=16), server_default="UNKNOWN", nullable=False),
        sa.Column("order_value", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("basket_size", sa.Integer(), nullable=True),
        sa.Column("discount_amount", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("order_datetime", sa.DateTime(timezone=False), nullable=True),
        sa.Column("restaurant_wait_time_minutes", sa.Integer(), nullable=True),
        sa.Column("total_delivery_time_minutes", sa.Integer(), nullable=True),
        sa.Column("courier_wait_time_minutes", sa.Integer(), nullable=True),
        sa.Column("prep_time_minutes", sa.Integer(), nullable=True),
        sa.Column("currency_code", sa.String(length=3), server_default="GBP", nullable=False),
        sa.Column("auto_accept_status", sa.String(length=50), nullable=True),
        _created_at(),
        sa.CheckConstraint(_in_clause("order_status", ORDER_STATUSES), name="ck_orders_order_status"),
        sa.CheckConstraint(_in_clause("delivery_type", DELIVERY_TYPES), name="ck_orders_delivery_type"),
        sa.CheckConstraint("order_value >= 0", name="ck_orders_order_value_non_negative"),
        sa.CheckConstraint("basket_size > 0", name="ck_orders_basket_size_positive"),
        sa.CheckConstraint("discount_amount >= 0", name="ck_orders_discount_amount_non_negative"),
        sa.CheckConstraint(
            "restaurant_wait_time_minutes >= 0 AND total_delivery_time_minutes >= 0 "
            "AND courier_wait_time_minutes >= 0 AND prep_time_minutes >= 0",
            name="ck_orders_wait_times_non_negative",
        ),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"]),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("platform_id", "platform_order_id", name="uq_orders_platform_order_id"),
    )
    op.create_index("ix_orders_platform_id", "orders", ["platform_id"], unique=False)
    op.create_index("ix_orders_restaurant_id", "orders", ["restaurant_id"], unique=False)
    op.create_index("ix_orders_order_datetime", "orders", ["order_datetime"], unique=False)
    op.create_index("ix_orders_order_status", "orders", ["order_status"], unique=False)
    op.create_index("ix_orders_restaurant_datetime", "orders", ["restaurant_id", "order_datetime"], unique=False)
    op.create_index("ix_orders_platform_status", "orders", ["platform_id", "order_status"], unique=False)

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("platform_id", sa.Integer(), nullable=False),
        sa.Column("platform_order_id", sa.String(length=100), nullable=True),
        sa.Column("rating_value", sa.Numeric(precision=3, scale=2), nullable=False),
        sa.Column("rating_type", sa.String(length=50), server_default="overall", nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("rating_date", sa.DateTime(timezone=False), nullable=True),
        _created_at(),
        sa.CheckConstraint("rating_value >= 0 AND rating_value <= 5", name="ck_ratings_rating_value_range"),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"]),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_ratings_platform_order_type",
        "ratings",
        ["platform_id", "platform_order_id", "rating_type"],
        unique=True,
        postgresql_where=sa.text("platform_order_id IS NOT NULL"),
    )
    op.create_index("ix_ratings_restaurant_id", "ratings", ["restaurant_id"], unique=False)
    op.create_index("ix_ratings_platform_id", "ratings", ["platform_id"], unique=False)
    op.create_index("ix_ratings_restaurant_date", "ratings", ["restaurant_id", "rating_date"], unique=False)

    op.create_table(
        "integrations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "name",
            sa.String(length=100),
            nullable=False,
            comment="Integration key, e.g. deliveryplatform3_total_order",
        ),
        sa.Column("platform_id", sa.Integer(), nullable=False),
        sa.Column(
            "field_mapping",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Source column -> field spec",
        ),
        sa.Column("tables", postgresql.ARRAY(sa.Text()), server_default="{}", nullable=False),
        sa.Column(
            "source_format",
            sa.String(length=50),
            nullable=True,
            comment="Source format variant key; derived from name when empty",
        ),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_integrations_is_active", "integrations", ["is_active"], unique=False)

    op.create_table(
        "ingestion_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("integration_id", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(length=500), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default="pending",
            nullable=False,
            comment="pending, completed, failed",
        ),
        sa.Column("total_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("processed_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("inserted_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("error_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ingestion_jobs_integration_id", "ingestion_jobs", ["integration_id"], unique=False)
    op.create_index("ix_ingestion_jobs_status", "ingestion_jobs", ["status"], unique=False)
    op.create_index("ix_ingestion_jobs_started_at", "ingestion_jobs", ["started_at"], unique=False)

    op.create_table(
        "data_source_files",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("integration_id", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(length=500), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False, comment="SHA-256 hex digest"),
        sa.Column("total_rows", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["integration_id"], ["integrations.id"]),
        sa.ForeignKeyConstraint(["job_id"], ["ingestion_jobs.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("integration_id", "file_hash", name="uq_data_source_files_integration_hash"),
    )


def downgrade() -> None:
    op.drop_table("data_source_files")

    op.drop_index("ix_ingestion_jobs_started_at", table_name="ingestion_jobs")
    op.drop_index("ix_ingestion_jobs_status", table_name="ingestion_jobs")
    op.drop_index("ix_ingestion_jobs_integration_id", table_name="ingestion_jobs")
    op.drop_table("ingestion_jobs")

    op.drop_index("ix_integrations_is_active", table_name="integrations")
    op.drop_table("integrations")

    op.drop_index("ix_ratings_restaurant_date", table_name="ratings")
    op.drop_index("ix_ratings_platform_id", table_name="ratings")
    op.drop_index("ix_ratings_restaurant_id", table_name="ratings")
    op.drop_index("uq_ratings_platform_order_type", table_name="ratings")
    op.drop_table("ratings")

    op.drop_index("ix_orders_platform_status", table_name="orders")
    op.drop_index("ix_orders_restaurant_datetime", table_name="orders")
    op.drop_index("ix_orders_order_status", table_name="orders")
    op.drop_index("ix_orders_order_datetime", table_name="orders")
    op.drop_index("ix_orders_restaurant_id", table_name="orders")
    op.drop_index("ix_orders_platform_id", table_name="orders")
    op.drop_table("orders")

    op.drop_index("ix_restaurants_platform_id", table_name="restaurants")
    op.drop_index("uq_restaurants_platform_external_id", table_name="restaurants")
    op.drop_table("restaurants")

    op.drop_table("platforms")
