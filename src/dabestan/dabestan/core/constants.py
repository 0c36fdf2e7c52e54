"""Defaults and limits shared by the services."""

DEFAULT_SESSION_DAYS = 7
DEFAULT_CLASS_CAPACITY = 30
MAX_CLASS_CAPACITY = 50
DEFAULT_TRANSPORT_CAPACITY = 20
DEFAULT_MEAL_MAX_ORDERS = 100
DEFAULT_STUDENT_PAGE_SIZE = 50
RECENT_ANNOUNCEMENTS = 3
FREQUENT_ABSENCE_THRESHOLD = 3
FREQUENT_ABSENCE_DAYS = 30
MAX_PAYMENT_AMOUNT = 100_000_000
MAX_NOTE_LENGTH = 200
