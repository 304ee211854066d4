"""
Initial schema for the product catalog and feed reconciliation.
"""

import uuid
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CatalogProduct",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "external_id",
                    models.CharField(
                        blank=True,
                        help_text="Identity key from the feed (SKU). Empty for hand-created products.",
                        max_length=100,
                        null=True,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=500)),
                ("description", models.TextField(blank=True, default="")),
                ("image", models.URLField(blank=True, default="", max_length=2000)),
                (
                    "price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True
                    ),
                ),
                ("product_url", models.URLField(blank=True, default="", max_length=2000)),
                ("availability", models.CharField(blank=True, default="", max_length=200)),
                ("brand", models.CharField(blank=True, default="", max_length=200)),
                (
                    "gtin",
                    models.CharField(
                        blank=True, default="", help_text="EAN/GTIN", max_length=50
                    ),
                ),
                (
                    "product_type",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Raw primary category string",
                        max_length=500,
                    ),
                ),
                ("feed_category", models.CharField(blank=True, default="", max_length=200)),
                ("feed_subcategory", models.CharField(blank=True, default="", max_length=200)),
                ("last_synced_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "catalog_products",
                "ordering": ["name"],
                "indexes": [
                    models.Index(
                        fields=["feed_category", "feed_subcategory"],
                        name="catalog_prod_category_idx",
                    ),
                    models.Index(fields=["brand"], name="catalog_prod_brand_idx"),
                    models.Index(fields=["last_synced_at"], name="catalog_prod_synced_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductMarketing",
            fields=[
                (
                    "category",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("herbal", "Herbal"),
                            ("functional", "Functional"),
                            ("children", "Children"),
                            ("organic", "Organic"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("sales_claim", models.TextField(blank=True, default="")),
                ("sales_claim_subtitle", models.TextField(blank=True, default="")),
                (
                    "why_buy",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="List of {icon, text} selling points",
                    ),
                ),
                ("target_audience", models.TextField(blank=True, default="")),
                ("pdf_url", models.URLField(blank=True, default="", max_length=2000)),
                ("video_url", models.URLField(blank=True, default="", max_length=2000)),
                (
                    "banner_urls",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {size, url} banners"
                    ),
                ),
                ("social_facebook", models.TextField(blank=True, default="")),
                ("social_instagram", models.TextField(blank=True, default="")),
                (
                    "social_facebook_image",
                    models.URLField(blank=True, default="", max_length=2000),
                ),
                (
                    "social_instagram_image",
                    models.URLField(blank=True, default="", max_length=2000),
                ),
                ("hashtags", models.JSONField(blank=True, default=list)),
                (
                    "brand_pillar",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("science", "Science"),
                            ("organic", "Organic"),
                            ("function", "Function"),
                            ("tradition", "Tradition"),
                            ("family", "Family"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                (
                    "tier",
                    models.CharField(
                        blank=True,
                        choices=[("A", "Tier A"), ("B", "Tier B"), ("C", "Tier C")],
                        default="",
                        max_length=1,
                    ),
                ),
                ("quick_reference_card", models.TextField(blank=True, default="")),
                (
                    "faq",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {question, answer}"
                    ),
                ),
                ("faq_text", models.TextField(blank=True, default="")),
                ("sales_forecast", models.TextField(blank=True, default="")),
                ("sensory_profile", models.TextField(blank=True, default="")),
                ("seasonal_opportunities", models.TextField(blank=True, default="")),
                ("main_benefits", models.TextField(blank=True, default="")),
                ("herb_composition", models.TextField(blank=True, default="")),
                ("competition_comparison", models.TextField(blank=True, default="")),
                (
                    "article_urls",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {title, url}"
                    ),
                ),
                ("is_top", models.BooleanField(default=False)),
                (
                    "top_order",
                    models.PositiveIntegerField(
                        blank=True, help_text="Position 1-10", null=True
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("marketing_last_updated", models.DateTimeField(blank=True, null=True)),
                ("last_updated_field", models.CharField(blank=True, default="", max_length=100)),
                (
                    "product",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="marketing",
                        to="catalog.catalogproduct",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product Marketing",
                "verbose_name_plural": "Product Marketing",
                "db_table": "catalog_product_marketing",
                "indexes": [
                    models.Index(fields=["is_top", "top_order"], name="catalog_mkt_top_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="GalleryImage",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "storage_key",
                    models.CharField(help_text="Blob storage reference", max_length=500),
                ),
                ("filename", models.CharField(max_length=255)),
                ("content_type", models.CharField(max_length=100)),
                ("size", models.PositiveBigIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="gallery_images",
                        to="catalog.catalogproduct",
                    ),
                ),
            ],
            options={
                "db_table": "catalog_gallery_images",
                "ordering": ["-uploaded_at"],
                "indexes": [
                    models.Index(fields=["storage_key"], name="catalog_gallery_key_idx"),
                    models.Index(fields=["uploaded_at"], name="catalog_gallery_uploaded_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MarketingBackup",
            fields=[
                (
                    "category",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("herbal", "Herbal"),
                            ("functional", "Functional"),
                            ("children", "Children"),
                            ("organic", "Organic"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("sales_claim", models.TextField(blank=True, default="")),
                ("sales_claim_subtitle", models.TextField(blank=True, default="")),
                (
                    "why_buy",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="List of {icon, text} selling points",
                    ),
                ),
                ("target_audience", models.TextField(blank=True, default="")),
                ("pdf_url", models.URLField(blank=True, default="", max_length=2000)),
                ("video_url", models.URLField(blank=True, default="", max_length=2000)),
                (
                    "banner_urls",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {size, url} banners"
                    ),
                ),
                ("social_facebook", models.TextField(blank=True, default="")),
                ("social_instagram", models.TextField(blank=True, default="")),
                (
                    "social_facebook_image",
                    models.URLField(blank=True, default="", max_length=2000),
                ),
                (
                    "social_instagram_image",
                    models.URLField(blank=True, default="", max_length=2000),
                ),
                ("hashtags", models.JSONField(blank=True, default=list)),
                (
                    "brand_pillar",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("science", "Science"),
                            ("organic", "Organic"),
                            ("function", "Function"),
                            ("tradition", "Tradition"),
                            ("family", "Family"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                (
                    "tier",
                    models.CharField(
                        blank=True,
                        choices=[("A", "Tier A"), ("B", "Tier B"), ("C", "Tier C")],
                        default="",
                        max_length=1,
                    ),
                ),
                ("quick_reference_card", models.TextField(blank=True, default="")),
                (
                    "faq",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {question, answer}"
                    ),
                ),
                ("faq_text", models.TextField(blank=True, default="")),
                ("sales_forecast", models.TextField(blank=True, default="")),
                ("sensory_profile", models.TextField(blank=True, default="")),
                ("seasonal_opportunities", models.TextField(blank=True, default="")),
                ("main_benefits", models.TextField(blank=True, default="")),
                ("herb_composition", models.TextField(blank=True, default="")),
                ("competition_comparison", models.TextField(blank=True, default="")),
                (
                    "article_urls",
                    models.JSONField(
                        blank=True, default=list, help_text="List of {title, url}"
                    ),
                ),
                ("is_top", models.BooleanField(default=False)),
                (
                    "top_order",
                    models.PositiveIntegerField(
                        blank=True, help_text="Position 1-10", null=True
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(db_index=True, max_length=100)),
                (
                    "original_product_name",
                    models.CharField(blank=True, default="", max_length=500),
                ),
                ("backed_up_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "catalog_marketing_backups",
                "ordering": ["-backed_up_at"],
                "indexes": [
                    models.Index(fields=["sku", "backed_up_at"], name="catalog_mbackup_sku_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="GalleryBackup",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(db_index=True, max_length=100)),
                ("storage_key", models.CharField(max_length=500)),
                ("filename", models.CharField(max_length=255)),
                ("content_type", models.CharField(max_length=100)),
                ("size", models.PositiveBigIntegerField(default=0)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("backed_up_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "catalog_gallery_backups",
                "ordering": ["-backed_up_at"],
                "indexes": [
                    models.Index(fields=["storage_key"], name="catalog_gbackup_key_idx"),
                ],
                "unique_together": {("sku", "storage_key")},
            },
        ),
        migrations.CreateModel(
            name="FeedTaxonomy",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("category", models.CharField(max_length=200, unique=True)),
                ("subcategories", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "Feed Taxonomy",
                "verbose_name_plural": "Feed Taxonomy",
                "db_table": "catalog_feed_taxonomy",
                "ordering": ["category"],
            },
        ),
        migrations.CreateModel(
            name="FeedSyncJob",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("feed_url", models.URLField(max_length=2000)),
                ("item_limit", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("running", "Running"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("items_parsed", models.IntegerField(default=0)),
                ("items_skipped", models.IntegerField(default=0)),
                ("created_count", models.IntegerField(default=0)),
                ("updated_count", models.IntegerField(default=0)),
                ("failed_count", models.IntegerField(default=0)),
                ("restored_count", models.IntegerField(default=0)),
                ("error_message", models.TextField(blank=True, default="")),
            ],
            options={
                "db_table": "catalog_feed_sync_jobs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "created_at"], name="catalog_syncjob_status_idx"
                    ),
                ],
            },
        ),
    ]
