import os
import tempfile

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timesheet_test_db"),
}

UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "timesheet-portal-test-uploads"))

IO_TIMEOUT_SECONDS = 5.0

LOG_LEVEL = "WARNING"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
