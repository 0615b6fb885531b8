from django.contrib import admin

from .models import FailureRecord, OfficePerformance


class FailureRecordInline(admin.TabularInline):
    model = FailureRecord
    extra = 0
    readonly_fields = ("complaint", "escalated_from", "escalated_to",
                       "reason", "created_at")


@admin.register(OfficePerformance)
class OfficePerformanceAdmin(admin.ModelAdmin):
    list_display = ("office", "office_role", "total_complaints",
                    "resolved_complaints", "escalated_complaints",
                    "average_resolution_time")
    list_filter = ("office_role",)
    readonly_fields = ("total_complaints", "resolved_complaints",
                       "escalated_complaints", "average_resolution_time")
    inlines = [FailureRecordInline]
