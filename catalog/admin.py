"""
Django admin configuration for the product catalog.

Provides interfaces for browsing synced products with their marketing
content and gallery, inspecting backups and the feed taxonomy, and a
read-only view of sync jobs.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from catalog.models import (
    CatalogProduct,
    FeedSyncJob,
    FeedTaxonomy,
    GalleryBackup,
    GalleryImage,
    MarketingBackup,
    ProductMarketing,
)
from catalog.services import purge, restore


class ProductMarketingInline(admin.StackedInline):
    model = ProductMarketing
    can_delete = False
    extra = 0
    readonly_fields = ["marketing_last_updated", "last_updated_field"]


class GalleryImageInline(admin.TabularInline):
    model = GalleryImage
    extra = 0
    fields = ["filename", "content_type", "size", "tags", "uploaded_at"]
    readonly_fields = ["uploaded_at"]


@admin.register(CatalogProduct)
class CatalogProductAdmin(admin.ModelAdmin):
    """
    Admin interface for catalog products.

    Feed-owned fields are read-only here; they are rewritten on every sync.
    """

    list_display = [
        "name",
        "external_id",
        "brand",
        "feed_category",
        "feed_subcategory",
        "price",
        "has_marketing_badge",
        "last_synced_at",
    ]
    list_filter = ["feed_category", "brand"]
    search_fields = ["name", "external_id", "gtin"]
    readonly_fields = [
        "id",
        "external_id",
        "name",
        "description",
        "image",
        "price",
        "product_url",
        "availability",
        "brand",
        "gtin",
        "product_type",
        "feed_category",
        "feed_subcategory",
        "last_synced_at",
        "created_at",
        "updated_at",
    ]
    inlines = [ProductMarketingInline, GalleryImageInline]
    actions = ["purge_with_backup"]

    fieldsets = (
        ("Identity", {
            "fields": ("id", "external_id", "name"),
        }),
        ("Feed Data", {
            "fields": (
                "description",
                "image",
                "price",
                "product_url",
                "availability",
                "brand",
                "gtin",
            ),
        }),
        ("Category", {
            "fields": ("product_type", "feed_category", "feed_subcategory"),
        }),
        ("Timestamps", {
            "fields": ("last_synced_at", "created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def has_marketing_badge(self, obj):
        """Display whether the product carries marketing content."""
        if obj.has_marketing_data:
            return format_html('<span style="color: #28a745;">{}</span>', "Yes")
        return "-"
    has_marketing_badge.short_description = "Marketing"

    @admin.action(description="Delete selected products (with backup)")
    def purge_with_backup(self, request, queryset):
        """Delete products through the purge service so content is backed up first."""
        result = purge(list(queryset.values_list("id", flat=True)))
        self.message_user(
            request,
            f"Deleted {result.deleted} products, backed up {result.backed_up} "
            f"marketing records and {result.gallery_backed_up} gallery images.",
            messages.SUCCESS if not result.failed else messages.WARNING,
        )


@admin.register(MarketingBackup)
class MarketingBackupAdmin(admin.ModelAdmin):
    """
    Admin interface for marketing backups.
    """

    list_display = ["sku", "original_product_name", "tier", "is_top", "backed_up_at"]
    list_filter = ["tier", "is_top", ("backed_up_at", admin.DateFieldListFilter)]
    search_fields = ["sku", "original_product_name"]
    readonly_fields = ["id", "sku", "original_product_name", "backed_up_at"]
    ordering = ["-backed_up_at"]
    actions = ["restore_to_matching_product"]

    @admin.action(description="Restore onto the live product with the same SKU")
    def restore_to_matching_product(self, request, queryset):
        restored = 0
        missing = []
        for sku in queryset.values_list("sku", flat=True).distinct():
            product = CatalogProduct.objects.filter(external_id=sku).first()
            if product is None:
                missing.append(sku)
                continue
            if restore(product.id, sku).restored:
                restored += 1

        self.message_user(request, f"Restored {restored} products.", messages.SUCCESS)
        if missing:
            self.message_user(
                request,
                f"No live product for: {', '.join(missing)}",
                messages.WARNING,
            )


@admin.register(GalleryBackup)
class GalleryBackupAdmin(admin.ModelAdmin):
    list_display = ["sku", "filename", "content_type", "size", "backed_up_at"]
    search_fields = ["sku", "filename", "storage_key"]
    readonly_fields = ["id", "backed_up_at"]
    ordering = ["-backed_up_at"]


@admin.register(FeedTaxonomy)
class FeedTaxonomyAdmin(admin.ModelAdmin):
    list_display = ["category", "subcategory_count", "updated_at"]
    search_fields = ["category"]
    readonly_fields = ["id", "category", "subcategories", "updated_at"]

    def subcategory_count(self, obj):
        return len(obj.subcategories or [])
    subcategory_count.short_description = "Subcategories"

    def has_add_permission(self, request):
        """Taxonomy is rebuilt by the sync."""
        return False


@admin.register(FeedSyncJob)
class FeedSyncJobAdmin(admin.ModelAdmin):
    """
    Admin interface for sync jobs.

    Read-only view of sync job status and metrics.
    """

    list_display = [
        "id_short",
        "feed_url",
        "status_badge",
        "started_at",
        "completed_at",
        "created_count",
        "updated_count",
        "failed_count",
        "restored_count",
        "duration_display",
    ]
    list_filter = [
        "status",
        ("created_at", admin.DateFieldListFilter),
    ]
    search_fields = ["feed_url", "id"]
    readonly_fields = [
        "id",
        "feed_url",
        "item_limit",
        "status",
        "created_at",
        "started_at",
        "completed_at",
        "items_parsed",
        "items_skipped",
        "created_count",
        "updated_count",
        "failed_count",
        "restored_count",
        "error_message",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        ("Job Information", {
            "fields": ("id", "feed_url", "item_limit", "status"),
        }),
        ("Timing", {
            "fields": ("created_at", "started_at", "completed_at"),
        }),
        ("Metrics", {
            "fields": (
                "items_parsed",
                "items_skipped",
                "created_count",
                "updated_count",
                "failed_count",
                "restored_count",
            ),
        }),
        ("Error Details", {
            "fields": ("error_message",),
            "classes": ("collapse",),
        }),
    )

    def id_short(self, obj):
        """Display shortened job ID."""
        return str(obj.id)[:8]
    id_short.short_description = "Job ID"

    def status_badge(self, obj):
        """Display status as colored badge."""
        colors = {
            "pending": "#ffc107",
            "running": "#007bff",
            "completed": "#28a745",
            "failed": "#dc3545",
        }
        color = colors.get(obj.status, "#6c757d")
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 2px 8px; border-radius: 4px;">{}</span>',
            color, obj.status.title()
        )
    status_badge.short_description = "Status"
    status_badge.admin_order_field = "status"

    def duration_display(self, obj):
        """Display job duration in human-readable format."""
        seconds = obj.duration_seconds
        if seconds is None:
            return "-"
        if seconds < 60:
            return f"{seconds:.1f}s"
        return f"{seconds / 60:.1f}m"
    duration_display.short_description = "Duration"

    def has_add_permission(self, request):
        """Disable manual job creation from admin."""
        return False

    def has_change_permission(self, request, obj=None):
        """Disable editing jobs (read-only)."""
        return False
