"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_AFTER = "09:30"
DEFAULT_HISTORY_LIMIT = 30
ADMIN_HISTORY_LIMIT = 200
DEFAULT_REPORT_DAYS = 7
PAYMENTS_DEFAULT_LIMIT = 50
MAX_LEAVE_DAYS = 365

AI_CONTEXT_TASK_LIMIT = 50
AI_CONTEXT_LEAVE_LIMIT = 10
AI_CONTEXT_ATTENDANCE_LIMIT = 14
AI_CONTEXT_PAGE_LIMIT = 10

PAGE_DEFAULT_TITLE = "Untitled"
PAGE_DEFAULT_ICON = "📄"
TEXT_BLOCK_TYPES = ("text", "heading1", "heading2", "sticky_note", "code", "hand_text")

CLIENT_NAME_MAX_LENGTH = 200
LAST_ACTIVE_REFRESH_SECONDS = 60

CHAT_FAILURE_REPLY = "I'm having a moment. Please try again!"
