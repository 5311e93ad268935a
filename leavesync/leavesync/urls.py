# leavesync/leavesync/urls.py

"""
Root URL Configuration for the leavesync Project.

The defined patterns are:
- `/admin/`: The Django administration site (read-only view of leaves).
- `/api/leaves/`: The direct web ingestion API, handled by the `leaves` app.
- `/slack/`: Slack webhook endpoints, handled by the `slackapp` app.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/leaves/', include('leaves.urls')),
    # For example, a request to `/slack/commands/` is routed to `slackapp.urls`.
    path('slack/', include('slackapp.urls')),
]
