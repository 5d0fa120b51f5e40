import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXP_MINUTES = int(os.getenv("JWT_EXP_MINUTES", "1440"))
RESET_TOKEN_MINUTES = int(os.getenv("RESET_TOKEN_MINUTES", "10"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_admin"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    # Seconds a request waits on a course row lock before giving up.
    "lock_wait_timeout": int(os.getenv("DB_LOCK_WAIT_TIMEOUT", "5")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Bootstrap admin account, created on startup when both are set.
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@campus.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

# Leave SMTP_HOST empty to only log outgoing mail.
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_SENDER = os.getenv("SMTP_SENDER", "no-reply@campus.local")
SMTP_USE_TLS = bool(int(os.getenv("SMTP_USE_TLS", "1")))
