import os
import sys
from importlib.util import find_spec
from pathlib import Path
from urllib.parse import urlparse

import dj_database_url
from decouple import config

HAS_CELERY = find_spec("celery") is not None
HAS_DJANGO_CELERY_BEAT = find_spec("django_celery_beat") is not None
HAS_REDIS_PACKAGE = find_spec("redis") is not None
HAS_SENTRY_SDK = find_spec("sentry_sdk") is not None

if HAS_SENTRY_SDK:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    if HAS_CELERY:
        from sentry_sdk.integrations.celery import CeleryIntegration

BASE_DIR = Path(__file__).resolve().parent.parent.parent
APPS_DIR = BASE_DIR / "apps"
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))

IS_TEST_RUN = (
    "test" in sys.argv
    or "PYTEST_CURRENT_TEST" in os.environ
    or any("pytest" in arg for arg in sys.argv)
)
LOGS_ROOT = Path(config("LOGS_ROOT", default=BASE_DIR / "logs"))
DEBUG = config("DEBUG", default=False, cast=bool)
if IS_TEST_RUN:
    DEBUG = False
SECRET_KEY = config(
    "DJANGO_SECRET_KEY",
    default="django-insecure-change-me-please-use-a-long-secret-key-for-local-dev",
)


def _split_csv_env(name: str, *, default: str = "") -> list[str]:
    raw_value = config(name, default=default)
    return [item.strip() for item in str(raw_value).split(",") if item.strip()]


ALLOWED_HOSTS = _split_csv_env("ALLOWED_HOSTS")

DATABASE_URL = config("DATABASE_URL", default="")
TEST_DATABASE_URL = config("TEST_DATABASE_URL", default="sqlite:///:memory:")

if IS_TEST_RUN:
    ACTIVE_DATABASE_URL = TEST_DATABASE_URL
else:
    if not DATABASE_URL:
        DATABASE_URL = (
            f"postgres://{config('POSTGRES_USER')}:{config('POSTGRES_PASSWORD')}"
            f"@{config('POSTGRES_HOST')}/{config('POSTGRES_DB')}"
        )
    ACTIVE_DATABASE_URL = DATABASE_URL

REDIS_HOST = config("REDIS_HOST", default="localhost")
REDIS_PORT = config("REDIS_PORT", default=6379, cast=int)
REDIS_DB = config("REDIS_DB", default=0, cast=int)
REDIS_CACHE_DB = config("REDIS_CACHE_DB", default=1, cast=int)
REDIS_URL = config(
    "REDIS_URL",
    default=f"redis://{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}",
)
REDIS_CACHE_URL = config(
    "REDIS_CACHE_URL",
    default=f"redis://{REDIS_HOST}:{REDIS_PORT}/{REDIS_CACHE_DB}",
)

DJANGO_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
]

THIRD_PARTY_APPS = []
if HAS_DJANGO_CELERY_BEAT:
    THIRD_PARTY_APPS.append("django_celery_beat")

LOCAL_APPS = [
    "core",
    "account",
    "ticket",
    "gamification.apps.GamificationConfig",
    "marketplace",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

DATABASES = {
    "default": dj_database_url.parse(
        url=ACTIVE_DATABASE_URL,
        conn_max_age=600,
        conn_health_checks=True,
    )
}

if IS_TEST_RUN or not HAS_REDIS_PACKAGE:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "support-desk-test-cache",
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_CACHE_URL,
            "TIMEOUT": None,
        }
    }

CELERY_BROKER_URL = config("CELERY_BROKER_URL", default=REDIS_URL)
CELERY_RESULT_BACKEND = config("CELERY_RESULT_BACKEND", default=CELERY_BROKER_URL)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"
CELERY_ENABLE_UTC = True
CELERY_TASK_IGNORE_RESULT = True
CELERY_TASK_ALWAYS_EAGER = IS_TEST_RUN
if HAS_DJANGO_CELERY_BEAT:
    CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"

CELERY_BEAT_SCHEDULE = {}
if HAS_CELERY:
    from celery.schedules import crontab

    CELERY_BEAT_SCHEDULE = {
        "recalculate-staff-stats-nightly": {
            "task": "gamification.tasks.recalculate_staff_stats",
            "schedule": crontab(hour=2, minute=0),
        },
    }

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Notifications
NOTIFICATIONS_ENABLED = config("NOTIFICATIONS_ENABLED", default=True, cast=bool)
SLACK_WEBHOOK_URL = config("SLACK_WEBHOOK_URL", default="")
DEFAULT_FROM_EMAIL = config("DEFAULT_FROM_EMAIL", default="support@localhost")
EMAIL_BACKEND = config(
    "EMAIL_BACKEND", default="django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = config("EMAIL_HOST", default="localhost")
EMAIL_PORT = config("EMAIL_PORT", default=25, cast=int)
EMAIL_HOST_USER = config("EMAIL_HOST_USER", default="")
EMAIL_HOST_PASSWORD = config("EMAIL_HOST_PASSWORD", default="")
EMAIL_USE_TLS = config("EMAIL_USE_TLS", default=False, cast=bool)
EMAIL_TIMEOUT = config("EMAIL_TIMEOUT", default=10, cast=int)

# Logging
LOGGING_SLACK_WEBHOOK_URL = config("LOGGING_SLACK_WEBHOOK_URL", default="")

SENTRY_DSN = config("SENTRY_DSN", default="")
SENTRY_ENVIRONMENT = config(
    "SENTRY_ENVIRONMENT",
    default="development" if DEBUG else "production",
)
SENTRY_RELEASE = config("SENTRY_RELEASE", default="")
SENTRY_TRACES_SAMPLE_RATE = config(
    "SENTRY_TRACES_SAMPLE_RATE",
    default=0.0,
    cast=float,
)
SENTRY_SEND_DEFAULT_PII = config(
    "SENTRY_SEND_DEFAULT_PII",
    default=False,
    cast=bool,
)


def _clamp_sample_rate(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _is_valid_sentry_dsn(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


SENTRY_TRACES_SAMPLE_RATE = _clamp_sample_rate(SENTRY_TRACES_SAMPLE_RATE)
SENTRY_ENABLED = bool(
    HAS_SENTRY_SDK and not IS_TEST_RUN and _is_valid_sentry_dsn(SENTRY_DSN)
)
if SENTRY_ENABLED:
    sentry_integrations = [DjangoIntegration()]
    if HAS_CELERY:
        sentry_integrations.append(CeleryIntegration())

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        release=SENTRY_RELEASE or None,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=SENTRY_SEND_DEFAULT_PII,
        integrations=sentry_integrations,
    )

os.makedirs(LOGS_ROOT, exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "event_context": {
            "()": "core.utils.logging.EventContextFilter",
        },
    },
    "formatters": {
        "colored": {
            "()": "colorlog.ColoredFormatter",
            "format": (
                "%(log_color)s[%(asctime)s] [%(levelname)s] "
                "[staff_id=%(staff_id)s ticket_id=%(ticket_id)s] "
                "%(name)s:%(lineno)d %(funcName)s | %(message)s"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S",
            "log_colors": {
                "DEBUG": "white",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        },
        "verbose": {
            "format": (
                "[%(asctime)s] [%(levelname)s] "
                "[staff_id=%(staff_id)s ticket_id=%(ticket_id)s] "
                "%(name)s:%(module)s:%(filename)s:%(lineno)d "
                "%(funcName)s | %(message)s"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "slack": {
            "format": (
                ":rotating_light: *Support desk error*\n"
                "*Level:* %(levelname)s\n"
                "*Message:* %(message)s\n"
                "*Location:* `%(module)s:%(filename)s:%(lineno)d` in `%(funcName)s`\n"
                "*Context:* staff_id=%(staff_id)s ticket_id=%(ticket_id)s\n"
                "```%(traceback)s```"
            )
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "colored",
            "filters": ["event_context"],
        },
        "app_file": {
            "level": "INFO",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": LOGS_ROOT / "app.log",
            "when": "midnight",
            "backupCount": 30,
            "formatter": "verbose",
            "filters": ["event_context"],
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": LOGS_ROOT / "error.log",
            "when": "midnight",
            "backupCount": 60,
            "formatter": "verbose",
            "filters": ["event_context"],
        },
        "slack_errors": {
            "level": "ERROR",
            "class": "core.utils.logging.SlackErrorHandler",
            "webhook_url": LOGGING_SLACK_WEBHOOK_URL,
            "filters": ["event_context"],
            "formatter": "slack",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["app_file", "console"],
            "level": "INFO",
            "propagate": False,
        },
        "ticket": {
            "handlers": ["app_file", "error_file", "console", "slack_errors"],
            "level": "INFO",
            "propagate": False,
        },
        "gamification": {
            "handlers": ["app_file", "error_file", "console", "slack_errors"],
            "level": "INFO",
            "propagate": False,
        },
        "": {
            "handlers": ["app_file", "error_file", "console"],
            "level": "INFO",
        },
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "account.User"  # noqa
