"""Service layer modules."""

from taskfields.services.custom_fields import CustomFieldService, get_custom_field_service

__all__ = [
    "CustomFieldService",
    "get_custom_field_service",
]
