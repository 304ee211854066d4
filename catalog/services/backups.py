"""
Backup read operations for the operator UI.
"""

from typing import Any, Dict, List

from catalog.models import GalleryBackup, MarketingBackup

SALES_CLAIM_PREVIEW_LENGTH = 120


def get_backup_stats() -> Dict[str, int]:
    """Counts of backed-up SKUs and backup rows."""
    return {
        "skusWithBackup": MarketingBackup.objects.values("sku").distinct().count(),
        "marketingBackups": MarketingBackup.objects.count(),
        "galleryBackups": GalleryBackup.objects.count(),
    }


def list_marketing_backups() -> List[Dict[str, Any]]:
    """Marketing backups, newest first, with a short sales claim preview."""
    backups = MarketingBackup.objects.order_by("-backed_up_at")

    return [
        {
            "id": str(backup.id),
            "sku": backup.sku,
            "originalProductName": backup.original_product_name,
            "isTop": backup.is_top,
            "topOrder": backup.top_order,
            "tier": backup.tier or None,
            "salesClaim": backup.sales_claim[:SALES_CLAIM_PREVIEW_LENGTH] or None,
            "backedUpAt": backup.backed_up_at.isoformat(),
        }
        for backup in backups
    ]
