from .analytics import (
    CalendarDataResponse,
    MoodDistributionResponse,
    StreakResponse,
    TagUsageItem,
    TagUsageResponse,
    WordCountTrendResponse,
)
from .category import CategoryInput, CategoryResponse
from .entry import EntryInput, EntryResponse
from .entry_query import EntrySearchRequest, EntrySearchResponse
from .result import ServiceResult
from .tag import TagCreate, TagResponse, TagSyncEffect
from .user import UserLogin, UserResponse

__all__ = [
    "CalendarDataResponse",
    "MoodDistributionResponse",
    "StreakResponse",
    "TagUsageItem",
    "TagUsageResponse",
    "WordCountTrendResponse",
    "CategoryInput",
    "CategoryResponse",
    "EntryInput",
    "EntryResponse",
    "EntrySearchRequest",
    "EntrySearchResponse",
    "ServiceResult",
    "TagCreate",
    "TagResponse",
    "TagSyncEffect",
    "UserLogin",
    "UserResponse",
]
