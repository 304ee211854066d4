"""
Catalog Django application.

This app keeps the local product catalog in sync with the external product
feed while preserving manually curated marketing content.
"""

default_app_config = "catalog.apps.CatalogConfig"
