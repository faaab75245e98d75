"""
Django settings for workforce project.
"""

import os
import sys
from pathlib import Path

import dj_database_url  # pip install dj-database-url
from decouple import config  # pip install python-decouple

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Check if we're running tests
TESTING = "test" in sys.argv or "pytest" in sys.modules

# SECURITY SETTINGS
SECRET_KEY = config(
    "SECRET_KEY", default="workforce-insecure-test-key" if TESTING else ""
)
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set")

DEBUG = config("DEBUG", default=False, cast=bool)

ALLOWED_HOSTS = config(
    "ALLOWED_HOSTS",
    default="localhost,127.0.0.1" + (",*" if DEBUG else ""),
).split(",")

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "django_filters",
    "corsheaders",
    "rest_framework.authtoken",
    # Local apps
    "core",
    "users",
    "worktime",
    "compliance",
    "payroll",
    "analytics",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",  # Must be first
]

if not TESTING:
    MIDDLEWARE.append("django.middleware.security.SecurityMiddleware")

MIDDLEWARE += [
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "workforce.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "workforce.wsgi.application"

DATABASE_URL = config("DATABASE_URL", default="")

if DATABASE_URL:
    DATABASES = {"default": dj_database_url.parse(DATABASE_URL)}
else:
    db_engine = config("DB_ENGINE", default="django.db.backends.sqlite3")

    if db_engine == "django.db.backends.postgresql":
        DATABASES = {
            "default": {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": config("DB_NAME", default="workforce_db"),
                "USER": config("DB_USER", default="workforce_user"),
                "PASSWORD": config("DB_PASSWORD", default=""),
                "HOST": config("DB_HOST", default="localhost"),
                "PORT": config("DB_PORT", default="5432"),
                "OPTIONS": {
                    "connect_timeout": 60,
                },
            }
        }
    else:
        DATABASES = {
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": BASE_DIR / "db.sqlite3",
            }
        }

REDIS_URL = config("REDIS_URL", default="redis://localhost:6379/0")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
        "KEY_PREFIX": "workforce",
        "TIMEOUT": 300,
    }
}

if not DEBUG:
    SECURE_CONTENT_TYPE_NOSNIFF = True
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_SSL_REDIRECT = config("SECURE_SSL_REDIRECT", default=True, cast=bool)
    SESSION_COOKIE_SECURE = config("SESSION_COOKIE_SECURE", default=True, cast=bool)
    CSRF_COOKIE_SECURE = config("CSRF_COOKIE_SECURE", default=True, cast=bool)

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in config(
        "CORS_ALLOWED_ORIGINS",
        default="http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
]
CORS_ALLOW_CREDENTIALS = True

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.TokenAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "core.pagination.StandardResultsSetPagination",
    "DEFAULT_FILTER_BACKENDS": ["django_filters.rest_framework.DjangoFilterBackend"],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
}

# Celery
CELERY_BROKER_URL = config("CELERY_BROKER_URL", default=REDIS_URL)
CELERY_RESULT_BACKEND = config("CELERY_RESULT_BACKEND", default=REDIS_URL)
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = "UTC"
CELERY_TASK_ALWAYS_EAGER = config("CELERY_TASK_ALWAYS_EAGER", default=False, cast=bool)

# Engine tunables. Core computations receive these explicitly through
# core.config.EngineConfig; nothing below is read from inside the engine.
WORKFORCE_ENGINE = {
    "standard_hours_per_week": config("STANDARD_HOURS_PER_WEEK", default=40.0, cast=float),
    "standard_hours_per_day": config("STANDARD_HOURS_PER_DAY", default=8.0, cast=float),
    "overtime_basis": config("OVERTIME_BASIS", default="weekly"),
    "overtime_cap_hours": config("OVERTIME_CAP_HOURS", default=None, cast=lambda v: float(v) if v else None),
    "burnout_weights": {
        "overtime": config("BURNOUT_WEIGHT_OVERTIME", default=50.0, cast=float),
        "workload": config("BURNOUT_WEIGHT_WORKLOAD", default=30.0, cast=float),
        "absence": config("BURNOUT_WEIGHT_ABSENCE", default=20.0, cast=float),
    },
    "risk_level_thresholds": {
        "critical": config("RISK_LEVEL_CRITICAL", default=80.0, cast=float),
        "high": config("RISK_LEVEL_HIGH", default=60.0, cast=float),
        "medium": config("RISK_LEVEL_MEDIUM", default=35.0, cast=float),
    },
    "currency": config("PAYROLL_CURRENCY", default="USD"),
}

# Pay profile applied by bulk generation when the caller supplies no items.
# Percentages are fractions: 0.10 == 10%.
PAYROLL_DEFAULT_PROFILE = {
    "allowances": [
        {"name": "Standard Allowance", "kind": "percentage", "value": "0.10"},
    ],
    "bonuses": [],
    "deductions": [],
    "tax_rules": [
        {"name": "Tax", "kind": "percentage", "value": "0.05"},
    ],
}

# Per-employee fan-out used by batch compliance, payroll and burnout runs
BULK_MAX_WORKERS = config("BULK_MAX_WORKERS", default=None, cast=lambda v: int(v) if v else None)
BULK_BATCH_TIMEOUT = config("BULK_BATCH_TIMEOUT", default=None, cast=lambda v: float(v) if v else None)

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {
            "min_length": 8,
        },
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = config("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOG_DIR = Path(config("LOG_DIR", default=str(BASE_DIR / "logs")))
LOG_DIR.mkdir(exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,

    "filters": {
        "pii_redactor": {"()": "workforce.logging_filters.PIIRedactorFilter"},
    },

    "formatters": {
        "verbose": {"format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}", "style": "{"},
        "simple":  {"format": "{levelname} {asctime} {message}", "style": "{"},
        "minimal": {"format": "{levelname} {message}", "style": "{"},
    },

    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "minimal",
            "level": "DEBUG" if DEBUG else "INFO",
            "filters": ["pii_redactor"],
        },
        "django_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": LOG_DIR / "django.log",
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "formatter": "simple",
            "level": "INFO",
            "encoding": "utf-8",
            "filters": ["pii_redactor"],
        },
        "engine_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": LOG_DIR / "engine.log",
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "formatter": "verbose",
            "level": "INFO",
            "encoding": "utf-8",
            "filters": ["pii_redactor"],
        },
    },

    "loggers": {
        "django":     {"handlers": ["django_file"] if not DEBUG else ["console"], "level": "INFO", "propagate": False},
        "core":       {"handlers": ["engine_file"] + (["console"] if DEBUG else []), "level": "INFO", "propagate": False},
        "worktime":   {"handlers": ["engine_file"] + (["console"] if DEBUG else []), "level": "INFO", "propagate": False},
        "compliance": {"handlers": ["engine_file"] + (["console"] if DEBUG else []), "level": "INFO", "propagate": False},
        "payroll":    {"handlers": ["engine_file"] + (["console"] if DEBUG else []), "level": "INFO", "propagate": False},
        "analytics":  {"handlers": ["engine_file"] + (["console"] if DEBUG else []), "level": "INFO", "propagate": False},

        "celery":          {"handlers": ["console"], "level": "INFO", "propagate": False},
        "gunicorn.error":  {"handlers": ["console"], "level": "INFO", "propagate": False},
        "gunicorn.access": {"handlers": ["console"], "level": "INFO", "propagate": False},

        "": {"handlers": ["console"], "level": "WARNING"},
    },
}

if os.environ.get("WORKFORCE_LOG_LEVEL"):
    for _name in ("core", "worktime", "compliance", "payroll", "analytics"):
        LOGGING["loggers"][_name]["level"] = os.environ["WORKFORCE_LOG_LEVEL"]
