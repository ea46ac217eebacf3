import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "memory" keeps records in-process; "mysql" uses DB_CONFIG
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_db"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

# Deadline for each file store / database call, in seconds
IO_TIMEOUT_SECONDS = float(os.getenv("IO_TIMEOUT_SECONDS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
