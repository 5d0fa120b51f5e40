import os

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
JWT_EXP_MINUTES = 60
RESET_TOKEN_MINUTES = 10

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_admin_test"),
    "connect_timeout": 5,
    "lock_wait_timeout": 2,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
ADMIN_EMAIL = None
ADMIN_PASSWORD = None

SMTP_HOST = ""
