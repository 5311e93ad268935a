# leavesync/leavesync/settings.py
"""
Django settings for the leavesync project.

This file contains the core configuration for the Django application, including
database settings, application definitions, logging, Slack credentials and the
Celery worker pool used for the Slack bot's background legs. Sensitive values
are loaded from a .env file so the same settings module works locally, in CI
and in production.
"""

from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

# ==============================================================================
# CORE SETTINGS
# ==============================================================================

# Build paths inside the project like this: BASE_DIR / 'subdir'
BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv(
    'DJANGO_SECRET_KEY',
    'dev-only-1k#v9q3x!t7m2w_leavesync_z8p$r4d&c6n0b5h',
)
# The DEBUG flag is loaded as a boolean from an environment variable.
DEBUG = os.getenv('DJANGO_DEBUG', 'True') == 'True'

ALLOWED_HOSTS = [
    "127.0.0.1",
    "localhost",
    "testserver",
]
if os.getenv('PRODUCTION_HOST'):
    ALLOWED_HOSTS.append(os.getenv('PRODUCTION_HOST'))


# ==============================================================================
# APPLICATION-SPECIFIC SETTINGS (Loaded from Environment Variables)
# ==============================================================================

SLACK_SIGNING_SECRET = os.getenv("SLACK_SIGNING_SECRET")
SLACK_BOT_TOKEN = os.getenv("SLACK_BOT_TOKEN")
# The slash command that starts the leave application flow.
SLACK_LEAVE_COMMAND = os.getenv("SLACK_LEAVE_COMMAND", "/leave")
# Requests signed longer ago than this are treated as replays.
SLACK_REQUEST_MAX_AGE_SECONDS = int(os.getenv("SLACK_REQUEST_MAX_AGE_SECONDS", "300"))

# Dotted path to the callable invoked after every successful ingestion.
# It receives the persisted Leave and the origin kind it came from.
LEAVE_OUTBOUND_SYNC_BACKEND = os.getenv(
    "LEAVE_OUTBOUND_SYNC_BACKEND",
    "leaves.sync.LoggingOutboundSync",
)


# ==============================================================================
# DJANGO-SPECIFIC CONFIGURATION
# ==============================================================================

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'leaves.apps.LeavesConfig',
    'slackapp.apps.SlackappConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'leavesync.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'leavesync.wsgi.application'


# Database Configuration
# Ingestion manages its own transactions, so ATOMIC_REQUESTS stays off.
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('LEAVESYNC_DB_PATH', BASE_DIR / 'db.sqlite3'),
    }
}


# Password validation
# https://docs.djangoproject.com/en/4.2/ref/settings/#auth-password-validators
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# Static files (CSS, JavaScript, Images)
# https://docs.djangoproject.com/en/4.2/howto/static-files/
STATIC_URL = 'static/'


# Default primary key field type
# https://docs.djangoproject.com/en/4.2/ref/settings/#default-auto-field
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    },
    'handlers': {
        'file': {
            'level': 'INFO',
            'class': 'logging.FileHandler',
            'filename': os.getenv('LEAVESYNC_LOG_FILE', 'leavesync.log'),
            'formatter': 'verbose',
            'delay': True,
        },
        'console': {
            'level': 'DEBUG',
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'leaves': {
            'handlers': ['file', 'console'],
            'level': 'INFO',
            'propagate': True,
        },
        'slackapp': {
            'handlers': ['file', 'console'],
            'level': 'INFO',
            'propagate': True,
        },
    },
}

# ==============================================================================
# CELERY CONFIGURATION
# ==============================================================================
# URL for the Redis message broker.
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
# Use JSON as the content type for tasks.
CELERY_ACCEPT_CONTENT = ['json']
# Use JSON as the task serializer.
CELERY_TASK_SERIALIZER = 'json'
# Slack legs are fire-and-forget; nobody reads their results.
CELERY_TASK_IGNORE_RESULT = True
# A small pool is enough: every leg is a couple of Slack calls or one ingestion.
CELERY_WORKER_CONCURRENCY = int(os.getenv('CELERY_WORKER_CONCURRENCY', '4'))
# Run tasks inline (local development without a broker).
CELERY_TASK_ALWAYS_EAGER = os.getenv('CELERY_TASK_ALWAYS_EAGER', 'False') == 'True'
