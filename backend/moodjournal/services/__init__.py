from .analytics import AnalyticsAggregator
from .entry_store import EntryStore
from .journal import JournalService
from .search import SearchFilterEngine
from .streaks import StreakService
from .tag_reconciler import TagReconciler
from .users import UserService

__all__ = [
    "AnalyticsAggregator",
    "EntryStore",
    "JournalService",
    "SearchFilterEngine",
    "StreakService",
    "TagReconciler",
    "UserService",
]
