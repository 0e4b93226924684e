"""Import all models so Base.metadata knows every table (create_all, migrations)."""
from match_chat.infrastructure.db.models.match import MatchModel
from match_chat.infrastructure.db.models.message import MessageModel
from match_chat.infrastructure.db.models.notification import NotificationModel
from match_chat.infrastructure.db.models.user_activity import UserActivityModel

__all__ = [
    "MatchModel",
    "MessageModel",
    "NotificationModel",
    "UserActivityModel",
]
