import os
from datetime import timedelta
from dotenv import load_dotenv


load_dotenv()

class Config:
    SECRET_KEY = os.getenv("JWT_SECRET_KEY")  # used for both Flask and JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "fallback-jwt")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///studyhall.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL")
    RATELIMIT_STORAGE_URI = REDIS_URL or "memory://"
    RATELIMIT_DEFAULT = "20000 per day;2000 per hour"
    RATELIMIT_HEADERS_ENABLED = True
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB upload cap
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_COOKIE_SECURE = os.getenv("JWT_COOKIE_SECURE", "true").lower() == "true"
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = False

    # Study hall runs on Korean school days
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Seoul")
    CHECKIN_WINDOW_START = os.getenv("CHECKIN_WINDOW_START", "06:30")
    CHECKIN_WINDOW_END = os.getenv("CHECKIN_WINDOW_END", "09:30")
    CHECKIN_WINDOW_ENFORCED = os.getenv("CHECKIN_WINDOW_ENFORCED", "true").lower() == "true"

    # Integrations. Empty means "not configured".
    ABSENCE_SHEET_URL = os.getenv("ABSENCE_SHEET_URL", "")
    SHEETS_EXPORT_URL = os.getenv("SHEETS_EXPORT_URL", "")
    SPREADSHEET_URL = os.getenv("SPREADSHEET_URL", "")
    DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL", "")
    SMS_API_URL = os.getenv("SMS_API_URL", "")
    HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
    ABSENCE_CACHE_SECONDS = int(os.getenv("ABSENCE_CACHE_SECONDS", "300"))

    REPORT_FONT_PATH = os.getenv("REPORT_FONT_PATH")
    REPORT_RECIPIENT = os.getenv("REPORT_RECIPIENT", "Head of Department")

    MOCK_DATA_ENABLED = os.getenv("MOCK_DATA_ENABLED", "false").lower() == "true"
    AUDIT_LOG_FILE = os.getenv("AUDIT_LOG_FILE", os.path.join("logs", "audit.log"))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-32"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_COOKIE_SECURE = False
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    CHECKIN_WINDOW_ENFORCED = False
    ABSENCE_SHEET_URL = ""
    SHEETS_EXPORT_URL = ""
    DISCORD_WEBHOOK_URL = ""
    SMS_API_URL = ""
    MOCK_DATA_ENABLED = False
