"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_INVITATION_DAYS = 7
DEFAULT_CADRE_PAGE_SIZE = 9
DEFAULT_USERS_PAGE_SIZE = 200
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_REPORT_DAYS = 28
MIN_PASSWORD_LENGTH = 6
MIN_BIRTH_YEAR = 1900
INVITATION_TOKEN_BYTES = 32

# Value used by select widgets to mean "no filter".
ALL_OPTION = "all"
