import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    MIGRATION_DB_URI = data.get("MIGRATION_DB_URI", "sqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Credits
    TRIAL_CREDITS = data.get("TRIAL_CREDITS", 25)
    TRANSACTIONS_MAX_PAGE_SIZE = data.get("TRANSACTIONS_MAX_PAGE_SIZE", 100)

    # Quota gate
    OWNER_UNLIMITED = bool(data.get("OWNER_UNLIMITED", True))
    QUOTA_ACTION_TIMEOUT_SECONDS = data.get("QUOTA_ACTION_TIMEOUT_SECONDS", 60.0)

    # Lemon Squeezy
    LEMON_SQUEEZY_API_KEY = data.get("LEMON_SQUEEZY_API_KEY", "PENDING")
    LEMON_SQUEEZY_STORE_ID = data.get("LEMON_SQUEEZY_STORE_ID", "PENDING")
    LEMON_SQUEEZY_WEBHOOK_SECRET = data.get("LEMON_SQUEEZY_WEBHOOK_SECRET", "PENDING")
    LEMON_SQUEEZY_API_URL = data.get("LEMON_SQUEEZY_API_URL", "https://api.lemonsqueezy.com")
    CREDIT_PACKAGES = data.get("CREDIT_PACKAGES", None)  # None = built-in starter/growth/pro

    # Notifications
    NOTIFICATION_WEBHOOK_URL = data.get("NOTIFICATION_WEBHOOK_URL", None)

    # Referral rewards
    REFERRAL_REWARD_TYPE = data.get("REFERRAL_REWARD_TYPE", "ai_access_extension")
    REFERRAL_ACCESS_EXTENSION_DAYS = data.get("REFERRAL_ACCESS_EXTENSION_DAYS", 365)
    REFERRAL_REWARD_CREDITS = data.get("REFERRAL_REWARD_CREDITS", 50)

    # Ledger audit
    LEDGER_AUDIT_ENABLED = bool(data.get("LEDGER_AUDIT_ENABLED", True))
    LEDGER_AUDIT_INTERVAL_SECONDS = data.get("LEDGER_AUDIT_INTERVAL_SECONDS", 86400)  # Daily
    LEDGER_AUDIT_ALERT_USER_ID = data.get("LEDGER_AUDIT_ALERT_USER_ID", None)  # Operator to notify
