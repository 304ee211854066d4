"""
Gallery media boundary.

Gallery rows (live GalleryImage and GalleryBackup) only hold a storage key;
the blob itself lives in Django's configured storage. A blob may be shared
by several rows, so it is deleted only once nothing references it.
"""

import logging
from typing import Any, Dict, List, Optional

from django.core.files.storage import Storage, default_storage
from django.db import transaction

from catalog.exceptions import InvalidConfirmationError
from catalog.models import CatalogProduct, GalleryBackup, GalleryImage

logger = logging.getLogger(__name__)


class BlobStorage:
    """Thin wrapper over a Django storage backend addressed by storage key."""

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or default_storage

    def url(self, storage_key: str) -> Optional[str]:
        if not storage_key:
            return None
        return self.storage.url(storage_key)

    def delete(self, storage_key: str) -> None:
        self.storage.delete(storage_key)


def is_blob_referenced(storage_key: str) -> bool:
    """True if any live gallery row or gallery backup points at the blob."""
    return (
        GalleryImage.objects.filter(storage_key=storage_key).exists()
        or GalleryBackup.objects.filter(storage_key=storage_key).exists()
    )


def attach_image(
    product_id,
    storage_key: str,
    filename: str,
    content_type: str,
    size: int = 0,
    tags: Optional[List[str]] = None,
) -> GalleryImage:
    """
    Attach an already stored blob to a product's gallery.

    Raises:
        InvalidConfirmationError: If the product does not exist or no key is given
    """
    if not storage_key:
        raise InvalidConfirmationError("A storage key is required")

    product = CatalogProduct.objects.filter(pk=product_id).first()
    if product is None:
        raise InvalidConfirmationError(f"Product not found: {product_id}")

    image = GalleryImage.objects.create(
        product=product,
        storage_key=storage_key,
        filename=filename,
        content_type=content_type,
        size=size,
        tags=list(tags or []),
    )
    logger.info(f"Attached {filename} to product {product_id}")
    return image


def list_product_images(
    product_id, tag: Optional[str] = None, storage: Optional[BlobStorage] = None
) -> List[Dict[str, Any]]:
    """
    Gallery rows of a product, newest first, with resolved URLs.

    Args:
        product_id: Product to list
        tag: Only rows carrying this tag
    """
    storage = storage or BlobStorage()
    images = GalleryImage.objects.filter(product_id=product_id).order_by("-uploaded_at")

    results = []
    for image in images:
        tags = image.tags or []
        if tag and tag not in tags:
            continue
        results.append(
            {
                "id": str(image.id),
                "storageKey": image.storage_key,
                "filename": image.filename,
                "contentType": image.content_type,
                "size": image.size,
                "tags": tags,
                "uploadedAt": image.uploaded_at.isoformat(),
                "url": storage.url(image.storage_key),
            }
        )
    return results


def delete_gallery_image(image_id, storage: Optional[BlobStorage] = None) -> bool:
    """
    Delete a live gallery row and, when unreferenced, its blob.

    Returns:
        True if the blob was deleted as well
    """
    storage = storage or BlobStorage()

    with transaction.atomic():
        image = GalleryImage.objects.select_for_update().filter(pk=image_id).first()
        if image is None:
            raise InvalidConfirmationError(f"Gallery image not found: {image_id}")

        storage_key = image.storage_key
        image.delete()
        referenced = is_blob_referenced(storage_key)

    if referenced:
        logger.info(f"Blob {storage_key} still referenced, keeping it")
        return False

    storage.delete(storage_key)
    logger.info(f"Deleted blob {storage_key}")
    return True
