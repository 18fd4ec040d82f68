from .user import User
from .category import Category
from .tag import PREBUILT_TAGS, EntryTag, Tag
from .entry import Entry, EntrySecondaryMood, count_words

__all__ = [
    "User",
    "Category",
    "Tag",
    "EntryTag",
    "PREBUILT_TAGS",
    "Entry",
    "EntrySecondaryMood",
    "count_words",
]
