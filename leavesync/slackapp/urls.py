# leavesync/slackapp/urls.py

"""
URL Configuration for the Slack App Integration.

These endpoints are the entry points for all communication from Slack.
"""

from django.urls import path
from . import views

app_name = 'slackapp'

urlpatterns = [
    # Slash command invocations, e.g. `/leave`.
    path("commands/", views.slash_command, name="slash_command"),

    # Modal submissions and dismissals, sent as a form field named `payload`.
    path("interactions/", views.interactions, name="interactions"),
]
