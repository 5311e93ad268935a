# leavesync/leaves/admin.py

"""
Admin Panel Configuration for Leaves.

Leaves are written only through the ingestion engine, which enforces the
overlap and origin-reference rules. The admin site is therefore a read and
filter view: records cannot be added, edited or deleted from here.
"""

# Standard library imports
from datetime import date

# Django imports
from django.contrib import admin

# Local application imports
from .models import Leave, OriginReference


class OriginReferenceInline(admin.TabularInline):
    """Shows which systems reported a leave."""
    model = OriginReference
    fields = ('origin_kind', 'origin_id', 'created_at')
    readonly_fields = fields
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None) -> bool:
        return False


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Leave)
class LeaveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """
    Admin configuration for the Leave model.

    Provides a list view with the leave's dates, calculated length and
    the origins that reported it, plus filters by status, type and origin.
    """
    list_display = ('id', 'user_id', 'leave_type', 'start_date', 'end_date', 'day_count',
                    'duration_type', 'status', 'origin_summary', 'is_current')
    list_filter = ('status', 'leave_type', 'duration_type', 'origin_references__origin_kind', 'start_date')
    search_fields = ('user_id', 'origin_references__origin_id')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [OriginReferenceInline]

    @admin.display(description='Days')
    def day_count(self, obj: Leave) -> float:
        """Calendar days covered; a half-day leave counts as 0.5."""
        if obj.duration_type != 'FULL_DAY':
            return 0.5
        return obj.date_range.day_count

    @admin.display(description='Origins')
    def origin_summary(self, obj: Leave) -> str:
        return ", ".join(str(ref) for ref in obj.origin_references.all())

    @admin.display(description='On Leave Today', boolean=True)
    def is_current(self, obj: Leave) -> bool:
        return obj.status == 'APPROVED' and obj.date_range.contains(date.today())


@admin.register(OriginReference)
class OriginReferenceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('origin_kind', 'origin_id', 'leave', 'created_at')
    list_filter = ('origin_kind',)
    search_fields = ('origin_id', 'leave__user_id')
