"""
Tests for UserManager.

The UserManager provides:
- create_user(): Creates cashier-level users with an optional password
- create_superuser(): Creates admin users with elevated privileges
"""

import pytest

from authentication.models import User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_email_and_password(self, db):
        """Should create a user that can authenticate with the password."""
        user = User.objects.create_user(
            email="cashier@example.com",
            password="SecurePass123!",
            full_name="Mona Adel",
        )

        assert user.pk is not None
        assert user.email == "cashier@example.com"
        assert user.check_password("SecurePass123!") is True
        assert user.is_staff is False

    def test_normalizes_email_domain_to_lowercase(self, db):
        """Domain part of the email is lowercased, local part preserved."""
        user = User.objects.create_user(email="Test.User@EXAMPLE.COM")

        assert user.email == "Test.User@example.com"

    def test_raises_valueerror_when_email_is_empty(self, db):
        """Email is mandatory."""
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_user(email="", password="TestPass123!")

        assert "must have an email address" in str(exc_info.value)

    def test_user_without_password_has_unusable_password(self, db):
        """Omitting the password leaves the account unable to log in."""
        user = User.objects.create_user(email="nopass@example.com")

        assert user.has_usable_password() is False


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_staff_flags(self, db):
        """Superusers are staff and superuser."""
        admin = User.objects.create_superuser(
            email="admin@example.com", password="AdminPass123!"
        )

        assert admin.is_staff is True
        assert admin.is_superuser is True

    def test_rejects_superuser_without_staff_flag(self, db):
        """is_staff=False is a contradiction for a superuser."""
        with pytest.raises(ValueError, match="is_staff=True"):
            User.objects.create_superuser(
                email="admin@example.com", password="x", is_staff=False
            )

    def test_rejects_superuser_without_superuser_flag(self, db):
        with pytest.raises(ValueError, match="is_superuser=True"):
            User.objects.create_superuser(
                email="admin@example.com", password="x", is_superuser=False
            )


class TestUserNames:
    """Tests for display-name helpers."""

    def test_full_name_falls_back_to_email(self, db):
        user = User.objects.create_user(email="anon@example.com")

        assert user.get_full_name() == "anon@example.com"
        assert user.get_short_name() == "anon"

    def test_short_name_is_first_word_of_full_name(self, db):
        user = User.objects.create_user(email="m@example.com", full_name="Mona Adel")

        assert user.get_short_name() == "Mona"
