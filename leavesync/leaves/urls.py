# leavesync/leaves/urls.py

"""URL patterns for the direct web ingestion API."""

from django.urls import path
from . import views

app_name = 'leaves'

urlpatterns = [
    # Any origin (web forms, calendar or timesheet sync) posts leaves here.
    path("ingest/", views.ingest, name="ingest"),
]
