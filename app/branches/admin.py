"""
Admin configuration for branches.
"""

from django.contrib import admin

from .models import Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    """
    Branch admin.

    Adding is disabled here because the admin form would create a branch
    without its cashbox; use the API (BranchService.create_branch).
    """

    list_display = ["branch_code", "name", "phone", "created_at"]
    search_fields = ["branch_code", "name"]
    readonly_fields = ["created_at", "updated_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
