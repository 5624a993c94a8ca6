"""
Authentication application.

This app provides the staff user model. Users are the actors recorded on
every ledger posting and reversal.

Key components:
    - User model: Custom email-based user authentication
    - UserManager: create_user / create_superuser helpers

Usage:
    from authentication.models import User
"""
