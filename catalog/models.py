"""
Django models for the product catalog and its feed reconciliation.

Models: CatalogProduct, ProductMarketing, GalleryImage, MarketingBackup,
        GalleryBackup, FeedTaxonomy, FeedSyncJob

A catalog product is split into two field groups with different owners:

- Feed-owned fields live on CatalogProduct and are rewritten by every sync.
- Marketing-owned fields live on ProductMarketing (one-to-one) and are only
  written by operators and by the restore step.

Backups are keyed by the product's identity key (external_id / "SKU") since
there is no other join between the feed and the catalog.
"""

import uuid
from dataclasses import dataclass, fields as dataclass_fields
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db import models
from django.utils import timezone


class MarketingCategoryChoices(models.TextChoices):
    """Marketing product line categories."""

    HERBAL = "herbal", "Herbal"
    FUNCTIONAL = "functional", "Functional"
    CHILDREN = "children", "Children"
    ORGANIC = "organic", "Organic"


class BrandPillarChoices(models.TextChoices):
    """Brand pillar a product is positioned under."""

    SCIENCE = "science", "Science"
    ORGANIC = "organic", "Organic"
    FUNCTION = "function", "Function"
    TRADITION = "tradition", "Tradition"
    FAMILY = "family", "Family"


class TierChoices(models.TextChoices):
    """Sales priority tier."""

    A = "A", "Tier A"
    B = "B", "Tier B"
    C = "C", "Tier C"


class SyncJobStatus(models.TextChoices):
    """Status of a feed sync run."""

    PENDING = "pending", "Pending"
    RUNNING = "running", "Running"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


def is_empty_value(value: Any) -> bool:
    """Check if a value should be considered empty/null."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


# ============================================================
# Catalog Product (feed-owned fields)
# ============================================================


@dataclass(frozen=True)
class FeedFields:
    """
    The feed-owned field group of a CatalogProduct.

    This is the only value the reconciler can write to a product.
    """

    external_id: str
    name: str
    description: str = ""
    image: str = ""
    price: Optional[Decimal] = None
    product_url: str = ""
    availability: str = ""
    brand: str = ""
    gtin: str = ""
    product_type: str = ""
    feed_category: str = ""
    feed_subcategory: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self)}


FEED_OWNED_FIELDS = tuple(f.name for f in dataclass_fields(FeedFields)) + (
    "last_synced_at",
)


class CatalogProduct(models.Model):
    """
    A product in the local catalog.

    Holds only the feed-owned fields. Marketing content is attached through
    the one-to-one ProductMarketing record (``product.marketing``).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Identity
    external_id = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        help_text="Identity key from the feed (SKU). Empty for hand-created products.",
    )

    # Feed data
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True, default="")
    image = models.URLField(max_length=2000, blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    product_url = models.URLField(max_length=2000, blank=True, default="")
    availability = models.CharField(max_length=200, blank=True, default="")
    brand = models.CharField(max_length=200, blank=True, default="")
    gtin = models.CharField(max_length=50, blank=True, default="", help_text="EAN/GTIN")
    product_type = models.CharField(
        max_length=500, blank=True, default="", help_text="Raw primary category string"
    )
    feed_category = models.CharField(max_length=200, blank=True, default="")
    feed_subcategory = models.CharField(max_length=200, blank=True, default="")
    last_synced_at = models.DateTimeField(null=True, blank=True)

    # Metadata
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    def save(self, *args, **kwargs):
        if not kwargs.pop("raw", False):
            self.updated_at = timezone.now()
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "updated_at" not in update_fields:
                kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)

    class Meta:
        db_table = "catalog_products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["feed_category", "feed_subcategory"], name="catalog_prod_category_idx"),
            models.Index(fields=["brand"], name="catalog_prod_brand_idx"),
            models.Index(fields=["last_synced_at"], name="catalog_prod_synced_idx"),
        ]

    def __str__(self):
        if self.external_id:
            return f"{self.name} ({self.external_id})"
        return self.name

    @classmethod
    def from_feed_fields(cls, feed_fields: FeedFields) -> "CatalogProduct":
        """Build an unsaved product carrying only feed-owned data."""
        return cls(last_synced_at=timezone.now(), **feed_fields.as_dict())

    def apply_feed_fields(self, feed_fields: FeedFields) -> None:
        """Overwrite the feed-owned fields and persist only those columns."""
        for name, value in feed_fields.as_dict().items():
            setattr(self, name, value)
        self.last_synced_at = timezone.now()
        self.save(update_fields=list(FEED_OWNED_FIELDS))

    def get_marketing(self) -> Optional["ProductMarketing"]:
        """Return the marketing record, or None if the product has none."""
        try:
            return self.marketing
        except ProductMarketing.DoesNotExist:
            return None

    @property
    def has_marketing_data(self) -> bool:
        marketing = self.get_marketing()
        return marketing is not None and marketing.has_marketing_data()


# ============================================================
# Marketing content (marketing-owned fields)
# ============================================================


class MarketingContent(models.Model):
    """
    Marketing-owned fields shared by the live record and its backups.
    """

    category = models.CharField(
        max_length=20, choices=MarketingCategoryChoices.choices, blank=True, default=""
    )
    sales_claim = models.TextField(blank=True, default="")
    sales_claim_subtitle = models.TextField(blank=True, default="")
    why_buy = models.JSONField(
        default=list, blank=True, help_text="List of {icon, text} selling points"
    )
    target_audience = models.TextField(blank=True, default="")
    pdf_url = models.URLField(max_length=2000, blank=True, default="")
    video_url = models.URLField(max_length=2000, blank=True, default="")
    banner_urls = models.JSONField(
        default=list, blank=True, help_text="List of {size, url} banners"
    )

    # Social
    social_facebook = models.TextField(blank=True, default="")
    social_instagram = models.TextField(blank=True, default="")
    social_facebook_image = models.URLField(max_length=2000, blank=True, default="")
    social_instagram_image = models.URLField(max_length=2000, blank=True, default="")
    hashtags = models.JSONField(default=list, blank=True)

    # Positioning
    brand_pillar = models.CharField(
        max_length=20, choices=BrandPillarChoices.choices, blank=True, default=""
    )
    tier = models.CharField(max_length=1, choices=TierChoices.choices, blank=True, default="")

    # Reference text blocks
    quick_reference_card = models.TextField(blank=True, default="")
    faq = models.JSONField(default=list, blank=True, help_text="List of {question, answer}")
    faq_text = models.TextField(blank=True, default="")
    sales_forecast = models.TextField(blank=True, default="")
    sensory_profile = models.TextField(blank=True, default="")
    seasonal_opportunities = models.TextField(blank=True, default="")
    main_benefits = models.TextField(blank=True, default="")
    herb_composition = models.TextField(blank=True, default="")
    competition_comparison = models.TextField(blank=True, default="")
    article_urls = models.JSONField(default=list, blank=True, help_text="List of {title, url}")

    # Top-N ranking
    is_top = models.BooleanField(default=False)
    top_order = models.PositiveIntegerField(null=True, blank=True, help_text="Position 1-10")

    class Meta:
        abstract = True

    def marketing_values(self) -> Dict[str, Any]:
        """Return the marketing-owned field values keyed by field name."""
        return {name: getattr(self, name) for name in MARKETING_CONTENT_FIELDS}

    def has_marketing_data(self) -> bool:
        """True if at least one marketing-owned field is non-empty."""
        return any(not is_empty_value(value) for value in self.marketing_values().values())


MARKETING_CONTENT_FIELDS = (
    "category",
    "sales_claim",
    "sales_claim_subtitle",
    "why_buy",
    "target_audience",
    "pdf_url",
    "video_url",
    "banner_urls",
    "social_facebook",
    "social_instagram",
    "social_facebook_image",
    "social_instagram_image",
    "hashtags",
    "brand_pillar",
    "tier",
    "quick_reference_card",
    "faq",
    "faq_text",
    "sales_forecast",
    "sensory_profile",
    "seasonal_opportunities",
    "main_benefits",
    "herb_composition",
    "competition_comparison",
    "article_urls",
    "is_top",
    "top_order",
)


class ProductMarketing(MarketingContent):
    """
    Marketing content curated by operators for one catalog product.

    Never written by the feed reconciler.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.OneToOneField(
        CatalogProduct,
        on_delete=models.CASCADE,
        related_name="marketing",
    )

    # Activity tracking
    marketing_last_updated = models.DateTimeField(null=True, blank=True)
    last_updated_field = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        db_table = "catalog_product_marketing"
        verbose_name = "Product Marketing"
        verbose_name_plural = "Product Marketing"
        indexes = [
            models.Index(fields=["is_top", "top_order"], name="catalog_mkt_top_idx"),
        ]

    def __str__(self):
        return f"Marketing for {self.product}"


# ============================================================
# Gallery (live media rows)
# ============================================================


class GalleryImage(models.Model):
    """
    An uploaded media asset attached to a product.

    ``storage_key`` references a blob in the storage backend; several rows
    (live and backup) may reference the same blob.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        CatalogProduct,
        on_delete=models.CASCADE,
        related_name="gallery_images",
    )
    storage_key = models.CharField(max_length=500, help_text="Blob storage reference")
    filename = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100)
    size = models.PositiveBigIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "catalog_gallery_images"
        ordering = ["-uploaded_at"]
        indexes = [
            models.Index(fields=["storage_key"], name="catalog_gallery_key_idx"),
            models.Index(fields=["uploaded_at"], name="catalog_gallery_uploaded_idx"),
        ]

    def __str__(self):
        return f"{self.filename} ({self.product_id})"


# ============================================================
# Backups (keyed by identity key)
# ============================================================


class MarketingBackup(MarketingContent):
    """
    Snapshot of a product's marketing content taken before deletion.

    History is append-only; several snapshots may exist for one SKU and the
    most recent one is used for restore.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sku = models.CharField(max_length=100, db_index=True)
    original_product_name = models.CharField(max_length=500, blank=True, default="")
    backed_up_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "catalog_marketing_backups"
        ordering = ["-backed_up_at"]
        indexes = [
            models.Index(fields=["sku", "backed_up_at"], name="catalog_mbackup_sku_idx"),
        ]

    def __str__(self):
        return f"Backup {self.sku} - {self.original_product_name}"


class GalleryBackup(models.Model):
    """
    Reference to a gallery blob of a deleted product, keyed by SKU.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sku = models.CharField(max_length=100, db_index=True)
    storage_key = models.CharField(max_length=500)
    filename = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100)
    size = models.PositiveBigIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    backed_up_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "catalog_gallery_backups"
        ordering = ["-backed_up_at"]
        unique_together = ["sku", "storage_key"]
        indexes = [
            models.Index(fields=["storage_key"], name="catalog_gbackup_key_idx"),
        ]

    def __str__(self):
        return f"{self.sku} - {self.filename}"


# ============================================================
# Feed taxonomy cache
# ============================================================


class FeedTaxonomy(models.Model):
    """
    Main category observed in the latest feed pull with its subcategories.

    Derived data for catalog filters; rebuilt on every sync.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    category = models.CharField(max_length=200, unique=True)
    subcategories = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "catalog_feed_taxonomy"
        ordering = ["category"]
        verbose_name = "Feed Taxonomy"
        verbose_name_plural = "Feed Taxonomy"

    def __str__(self):
        return f"{self.category} ({len(self.subcategories)} subcategories)"


# ============================================================
# Sync job tracking
# ============================================================


class FeedSyncJob(models.Model):
    """
    Tracks individual feed sync runs.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    feed_url = models.URLField(max_length=2000)
    item_limit = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=20, choices=SyncJobStatus.choices, default=SyncJobStatus.PENDING
    )

    # Timing
    created_at = models.DateTimeField(default=timezone.now)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Metrics
    items_parsed = models.IntegerField(default=0)
    items_skipped = models.IntegerField(default=0)
    created_count = models.IntegerField(default=0)
    updated_count = models.IntegerField(default=0)
    failed_count = models.IntegerField(default=0)
    restored_count = models.IntegerField(default=0)

    error_message = models.TextField(blank=True, default="")

    class Meta:
        db_table = "catalog_feed_sync_jobs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="catalog_syncjob_status_idx"),
        ]

    def __str__(self):
        return f"Sync {self.id} ({self.status})"

    @property
    def duration_seconds(self):
        """Calculate job duration."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def start(self):
        """Mark job as started."""
        self.status = SyncJobStatus.RUNNING
        self.started_at = timezone.now()
        self.save(update_fields=["status", "started_at"])

    def complete(self, success: bool = True, error_message: str = None):
        """Mark job as completed or failed."""
        self.status = SyncJobStatus.COMPLETED if success else SyncJobStatus.FAILED
        self.completed_at = timezone.now()
        if error_message:
            self.error_message = error_message
        self.save(update_fields=["status", "completed_at", "error_message"])
