"""
Models package - enums shared by schemas and services.
"""
from app.models.enums import LanguageSortBy, ResourceType

__all__ = ["LanguageSortBy", "ResourceType"]
