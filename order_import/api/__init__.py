from .client import BULK_IMPORT_ENDPOINT, ApiError, BulkImportClient

__all__ = [
    "BULK_IMPORT_ENDPOINT",
    "ApiError",
    "BulkImportClient",
]
