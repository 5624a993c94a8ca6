"""
Django app configuration for branches.
"""

from django.apps import AppConfig


class BranchesConfig(AppConfig):
    """Configuration for the branches application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "branches"
    verbose_name = "Branches"
