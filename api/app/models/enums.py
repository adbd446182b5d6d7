"""
Model enums.
"""
from enum import Enum


class ResourceType(str, Enum):
    """Kinds of learning resources."""
    APP = "app"
    BOOK = "book"
    COURSE = "course"
    WEBSITE = "website"
    VIDEO = "video"
    PODCAST = "podcast"


class LanguageSortBy(str, Enum):
    """Sort orders for language listings."""
    NAME = "name"
    DIFFICULTY_ASC = "difficulty-asc"
    DIFFICULTY_DESC = "difficulty-desc"
    HOURS_ASC = "hours-asc"
    HOURS_DESC = "hours-desc"
    SPEAKERS_ASC = "speakers-asc"
    SPEAKERS_DESC = "speakers-desc"
