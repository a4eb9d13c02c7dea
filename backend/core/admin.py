from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'first_name', 'last_name', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_active', 'is_staff', 'is_superuser', 'date_joined']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Additional Info', {'fields': ('phone',)}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['action_type', 'entity_type', 'entity_id', 'order', 'customer', 'performed_by', 'created_at']
    list_filter = ['action_type', 'entity_type', 'created_at']
    search_fields = ['entity_id', 'description', 'performed_by']
    ordering = ['-created_at']
    readonly_fields = ['action_type', 'entity_type', 'entity_id', 'order', 'customer', 'description', 'metadata', 'performed_by', 'created_at']
