"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_USER_LIST_LIMIT = 100
DEFAULT_MAX_INDEX_SIZE = 5000

# Key prefixes of the backing store. Existing data depends on these values.
USER_PREFIX = "user:"
EMPLOYEE_PREFIX = "employee:"
DEPARTMENT_PREFIX = "department:"
ATTENDANCE_PREFIX = "attendance:"
BIOMETRIC_PREFIX = "biometric:"

EMPLOYEE_IDS_KEY = "employee:ids"
