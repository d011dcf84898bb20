SECRET_KEY = "test-secret-key"

STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "pointage_test",
}

MAX_INDEX_SIZE = 5000

LOG_LEVEL = "DEBUG"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
