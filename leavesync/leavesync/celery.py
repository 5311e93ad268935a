# leavesync/leavesync/celery.py

"""
Celery Configuration for the leavesync Project.

This module defines the Celery application that runs the Slack bot's
background legs (opening the leave modal, ingesting a submitted form and
posting thread replies). The webhook views only enqueue work here so they can
acknowledge Slack within its three-second deadline.

When a Celery worker is started, this file is executed to:
1.  Ensure the Django settings are loaded correctly.
2.  Create and configure the Celery app instance.
3.  Automatically discover asynchronous tasks defined in the project's apps.
"""

import os
from celery import Celery

# Must come before the app instance is created so workers share the web
# process's Django configuration.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'leavesync.settings')

app = Celery('leavesync')

# All Celery options live in settings.py with a `CELERY_` prefix,
# e.g. CELERY_BROKER_URL, CELERY_WORKER_CONCURRENCY.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Registers the tasks in every installed app's `tasks.py`.
app.autodiscover_tasks()
