from django.contrib import admin

from .models import (
    Complaint,
    ComplaintAttachment,
    ComplaintDeadline,
    ComplaintResolution,
    ComplaintResponse,
    EscalationHistory,
)


class ComplaintAttachmentInline(admin.TabularInline):
    model = ComplaintAttachment
    extra = 0


class ComplaintDeadlineInline(admin.TabularInline):
    model = ComplaintDeadline
    extra = 0


class ComplaintResponseInline(admin.TabularInline):
    model = ComplaintResponse
    extra = 0
    readonly_fields = ("responder", "responder_role", "body",
                       "internal_comment", "status", "created_at")


class EscalationHistoryInline(admin.TabularInline):
    model = EscalationHistory
    extra = 0
    readonly_fields = ("from_handler", "to_handler", "reason", "created_at")


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "status", "current_stage",
                    "current_handler", "stakeholder_office", "updated_at")
    list_filter = ("status", "current_stage", "current_handler")
    search_fields = ("title", "description", "location")
    readonly_fields = ("version",)
    inlines = [ComplaintAttachmentInline, ComplaintDeadlineInline,
               ComplaintResponseInline, EscalationHistoryInline]


@admin.register(ComplaintResolution)
class ComplaintResolutionAdmin(admin.ModelAdmin):
    list_display = ("complaint", "resolved_by", "resolver_role", "created_at")
    list_filter = ("resolver_role",)


@admin.register(EscalationHistory)
class EscalationHistoryAdmin(admin.ModelAdmin):
    list_display = ("complaint", "from_handler", "to_handler", "created_at")
    list_filter = ("to_handler",)
