import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "mysql" stores everything in one key-value table; "memory" keeps it in-process
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "pointage_db"),
}

# Largest id list a single index key may hold
MAX_INDEX_SIZE = int(os.getenv("MAX_INDEX_SIZE", "5000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, the kv table is created on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
