"""Catalog schema — reference tables, details, products, skus, sku_prices

Revision ID: 001_catalog_schema
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001_catalog_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- reference tables ---
    op.create_table(
        "groups",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer groupId"),
    )
    op.create_index("ix_groups_tcgplayer_id", "groups", ["tcgplayer_id"])

    op.create_table(
        "rarities",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, comment="Rarity display text"),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer rarityId"),
    )
    op.create_index("ix_rarities_name", "rarities", ["name"])

    op.create_table(
        "printings",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer printingId"),
    )

    op.create_table(
        "conditions",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("abbreviation", sa.String(), nullable=False, server_default=""),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer conditionId"),
    )

    op.create_table(
        "languages",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer languageId"),
    )

    # --- catalog ---
    op.create_table(
        "details",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, unique=True, comment="TCGplayer cleanName"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer productId"),
        sa.Column("tcgplayer_url", sa.String(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(), nullable=False, server_default=""),
        sa.Column("detail_id", sa.INTEGER(), sa.ForeignKey("details.id"), nullable=False),
        sa.Column(
            "group_id",
            sa.INTEGER(),
            sa.ForeignKey("groups.id"),
            nullable=True,
            comment="NULL when the upstream groupId did not match a stored group",
        ),
        sa.Column("rarity_id", sa.INTEGER(), sa.ForeignKey("rarities.id"), nullable=False),
    )
    op.create_index("ix_products_tcgplayer_id", "products", ["tcgplayer_id"])

    op.create_table(
        "skus",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("tcgplayer_id", sa.INTEGER(), nullable=False, comment="TCGplayer skuId"),
        sa.Column("product_id", sa.INTEGER(), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("printing_id", sa.INTEGER(), sa.ForeignKey("printings.id"), nullable=True),
        sa.Column("condition_id", sa.INTEGER(), sa.ForeignKey("conditions.id"), nullable=True),
        sa.Column("language_id", sa.INTEGER(), sa.ForeignKey("languages.id"), nullable=False),
    )
    op.create_index("ix_skus_tcgplayer_id", "skus", ["tcgplayer_id"])

    # --- price history (append-only) ---
    op.create_table(
        "sku_prices",
        sa.Column("id", sa.INTEGER(), primary_key=True, autoincrement=True),
        sa.Column("sku_id", sa.INTEGER(), sa.ForeignKey("skus.id"), nullable=False),
        sa.Column("price", sa.REAL(), nullable=True, comment="Lowest listing price (USD)"),
        sa.Column("shipping", sa.REAL(), nullable=True, comment="Lowest shipping cost (USD)"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_sku_prices_sku_created", "sku_prices", ["sku_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_sku_prices_sku_created", table_name="sku_prices")
    op.drop_table("sku_prices")
    op.drop_index("ix_skus_tcgplayer_id", table_name="skus")
    op.drop_table("skus")
    op.drop_index("ix_products_tcgplayer_id", table_name="products")
    op.drop_table("products")
    op.drop_table("details")
    op.drop_table("languages")
    op.drop_table("conditions")
    op.drop_table("printings")
    op.drop_index("ix_rarities_name", table_name="rarities")
    op.drop_table("rarities")
    op.drop_index("ix_groups_tcgplayer_id", table_name="groups")
    op.drop_table("groups")
