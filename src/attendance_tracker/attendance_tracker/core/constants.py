"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_ATTENDANCE_PERCENTAGE = 75
EXCELLENT_PERCENTAGE = 85

DEFAULT_GOAL_PERCENTAGE = 75
MIN_GOAL_PERCENTAGE = 50
MAX_GOAL_PERCENTAGE = 100
SUBJECT_ALERT_MIN_CLASSES = 3

SHARE_CODE_LENGTH = 6
SHARE_CODE_MAX_ATTEMPTS = 5

MAX_IMAGE_BYTES = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("png", "jpeg", "jpg", "gif", "webp")

MAX_CHAT_MESSAGES = 50
MAX_CHAT_CONTENT_LENGTH = 5000
MAX_CHAT_TIMETABLE_ENTRIES = 100
MAX_CHAT_SUBJECTS = 50

DEFAULT_REMINDER_TIME = "18:30"
DEFAULT_REMINDER_TIMEZONE = "Asia/Kolkata"
