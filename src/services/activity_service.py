"""Per-user activity log.

All users share one log under ``user_activities``, newest first and capped
at ``ACTIVITY_LOG_CAPACITY`` entries. Timestamps are epoch milliseconds.
"""

import time
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from model.History import ACTIVITY_LOG_CAPACITY
from services.storage import KeyValueStore, load_json_list, save_json


ACTIVITIES_KEY = 'user_activities'

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


class ActivityType(str, Enum):
    CALCULATION = 'calculation'
    EXCHANGE = 'exchange'
    INVESTMENT = 'investment'
    COIN_FLIP = 'coin-flip'
    DATE = 'date'
    PROGRAMMING = 'programming'


class ActivityIcon(str, Enum):
    CALCULATOR = 'calculator'
    EXCHANGE = 'exchange'
    CHART = 'chart'
    COINS = 'coins'
    CALENDAR = 'calendar'
    CODE = 'code'
    HISTORY = 'history'


ACTIVITY_ICONS: Dict[ActivityType, ActivityIcon] = {
    ActivityType.CALCULATION: ActivityIcon.CALCULATOR,
    ActivityType.EXCHANGE: ActivityIcon.EXCHANGE,
    ActivityType.INVESTMENT: ActivityIcon.CHART,
    ActivityType.COIN_FLIP: ActivityIcon.COINS,
    ActivityType.DATE: ActivityIcon.CALENDAR,
    ActivityType.PROGRAMMING: ActivityIcon.CODE,
}


def icon_for(activity_type: str) -> ActivityIcon:
    """Icon for a stored type; unknown types fall back to the history icon."""
    try:
        return ACTIVITY_ICONS[ActivityType(activity_type)]
    except ValueError:
        return ActivityIcon.HISTORY


def now_ms() -> int:
    return int(time.time() * 1000)


def format_relative_time(timestamp: int, now: Optional[int] = None) -> str:
    """Describe a past timestamp relative to ``now`` (both epoch ms).

    Under a minute reads as "just now"; under a week as minutes, hours or
    days ago; anything older as a calendar date.
    """
    now = now_ms() if now is None else now
    diff = now - timestamp
    minutes = diff // MS_PER_MINUTE
    hours = diff // MS_PER_HOUR
    days = diff // MS_PER_DAY

    if minutes < 1:
        return 'just now'
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days != 1 else ''} ago"
    return datetime.fromtimestamp(timestamp / 1000).strftime('%Y-%m-%d')


@dataclass
class Activity:
    id: str
    user_id: str
    type: str
    description: str
    timestamp: int

    @property
    def icon(self) -> ActivityIcon:
        return icon_for(self.type)

    def relative_time(self, now: Optional[int] = None) -> str:
        return format_relative_time(self.timestamp, now)


@dataclass
class ActivityStats:
    today: int = 0
    this_week: int = 0
    this_month: int = 0


class ActivityService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self) -> List[Activity]:
        activities = []
        for raw in load_json_list(self.store, ACTIVITIES_KEY):
            try:
                activities.append(Activity(**raw))
            except TypeError:
                logger.warning("Skipping malformed activity record: {}", raw)
        return activities

    def add_activity(self, user_id: str, activity_type: ActivityType, description: str,
                     timestamp: Optional[int] = None) -> Activity:
        """Prepend an activity and trim the shared log to its capacity."""
        activity = Activity(
            id=uuid.uuid4().hex,
            user_id=user_id,
            type=ActivityType(activity_type).value,
            description=description,
            timestamp=now_ms() if timestamp is None else timestamp,
        )
        activities = [activity] + self._load()
        save_json(self.store, ACTIVITIES_KEY,
                  [asdict(a) for a in activities[:ACTIVITY_LOG_CAPACITY]])
        return activity

    def get_user_activities(self, user_id: str) -> List[Activity]:
        return [a for a in self._load() if a.user_id == user_id]

    def get_recent_activities(self, user_id: str, limit: int = 3) -> List[Activity]:
        return self.get_user_activities(user_id)[:limit]

    def get_activity_stats(self, user_id: str, now: Optional[int] = None) -> ActivityStats:
        """Count a user's activities within the last 1, 7 and 30 days."""
        now = now_ms() if now is None else now
        stats = ActivityStats()
        for activity in self.get_user_activities(user_id):
            age = now - activity.timestamp
            if age < MS_PER_DAY:
                stats.today += 1
            if age < 7 * MS_PER_DAY:
                stats.this_week += 1
            if age < 30 * MS_PER_DAY:
                stats.this_month += 1
        return stats
