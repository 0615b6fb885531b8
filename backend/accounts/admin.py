from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User
from .services import UserManagementService


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "id_number", "role", "office_name",
                    "is_approved", "is_active")
    search_fields = ("username", "email", "id_number", "phone", "office_name")
    list_filter = ("role", "is_approved", "is_active", "office_type", "kifleketema")
    actions = ["approve_offices"]
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Extra Info", {"fields": ("id_number", "phone", "address", "role", "is_approved")}),
        ("Office", {"fields": ("office_name", "office_type", "office_address",
                               "office_phone", "kifleketema", "wereda")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Extra Info", {"fields": ("email", "id_number", "phone",
                                   "first_name", "last_name", "role")}),
    )

    @admin.action(description="Approve selected office accounts")
    def approve_offices(self, request, queryset):
        updated = UserManagementService.approve_offices(queryset)
        self.message_user(request, f"{updated} office account(s) approved.")
