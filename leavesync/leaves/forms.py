# leavesync/leaves/forms.py

"""Validation of the JSON body accepted by the web ingestion endpoint."""

from django import forms

from .dates import DateRange
from .models import DurationType, LeaveStatus, LeaveType, OriginKind


class LeaveIngestionForm(forms.Form):
    """
    Field-level checks for a web ingestion request.

    The form only rejects malformed input; the business rules (half days,
    overlaps, origin references) are enforced by the ingestion engine.
    """
    source_type = forms.ChoiceField(choices=OriginKind.choices)
    source_id = forms.CharField(max_length=100)
    user_id = forms.CharField(max_length=50)
    start_date = forms.DateField()
    end_date = forms.DateField()
    type = forms.ChoiceField(choices=LeaveType.choices)
    status = forms.ChoiceField(choices=LeaveStatus.choices)
    duration_type = forms.ChoiceField(choices=DurationType.choices, required=False)

    def clean_duration_type(self):
        return self.cleaned_data.get('duration_type') or DurationType.FULL_DAY

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and end_date < start_date:
            self.add_error('end_date', "End date cannot be before the start date.")
        return cleaned_data

    def to_ingestion_kwargs(self) -> dict:
        """Maps the cleaned data onto the arguments of `ingest_leave`."""
        data = self.cleaned_data
        return {
            "origin_kind": data['source_type'],
            "origin_id": data['source_id'],
            "user_id": data['user_id'],
            "date_range": DateRange(data['start_date'], data['end_date']),
            "leave_type": data['type'],
            "status": data['status'],
            "duration_type": data['duration_type'],
        }
