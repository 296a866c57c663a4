from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from account.models import User


class UserModelTests(TestCase):
    def test_create_user_hashes_password(self):
        user = User.objects.create_user(email="user@example.com", password="Pass123!")

        self.assertNotEqual(user.password, "Pass123!")
        self.assertTrue(user.check_password("Pass123!"))
        self.assertEqual(user.username, "user")
        self.assertEqual(user.role, User.Role.USER)

    def test_create_user_requires_email(self):
        with self.assertRaisesMessage(ValueError, "Users must have an email"):
            User.objects.create_user(email="", password="Pass123!")

    def test_create_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="Pass123!", username="root")

        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.has_role(User.Role.ADMIN))


class AuthApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_always_creates_plain_user(self):
        response = self.client.post(
            "/api/auth/register/",
            {
                "username": "siteworker",
                "email": "worker@example.com",
                "password": "Gr4vel-and-Sand!",
                "role": "admin",
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertNotIn("password", response.data)
        user = User.objects.get(email="worker@example.com")
        self.assertEqual(user.role, User.Role.USER)
        self.assertTrue(user.check_password("Gr4vel-and-Sand!"))

    def test_login_returns_token_pair(self):
        User.objects.create_user(email="login@example.com", password="Gr4vel-and-Sand!", username="login")

        response = self.client.post(
            "/api/auth/login/",
            {"email": "login@example.com", "password": "Gr4vel-and-Sand!"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_login_rejects_wrong_password(self):
        User.objects.create_user(email="login@example.com", password="Gr4vel-and-Sand!", username="login")

        response = self.client.post(
            "/api/auth/login/",
            {"email": "login@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)

    def test_me_requires_authentication(self):
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 401)

    def test_me_returns_profile_with_role(self):
        user = User.objects.create_user(email="me@example.com", password="Pass123!", role=User.Role.MANAGER)
        self.client.force_authenticate(user)

        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["email"], "me@example.com")
        self.assertEqual(response.data["role"], "manager")

    def test_profile_update_cannot_change_role(self):
        user = User.objects.create_user(email="me@example.com", password="Pass123!")
        self.client.force_authenticate(user)

        response = self.client.patch("/api/auth/me/", {"first_name": "Abel", "role": "admin"}, format="json")

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertEqual(user.first_name, "Abel")
        self.assertEqual(user.role, User.Role.USER)

    def test_change_password(self):
        user = User.objects.create_user(email="me@example.com", password="Pass123!")
        self.client.force_authenticate(user)

        response = self.client.post(
            "/api/auth/change-password/",
            {"current_password": "Pass123!", "new_password": "Gr4vel-and-Sand!"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertTrue(user.check_password("Gr4vel-and-Sand!"))

    def test_change_password_rejects_wrong_current_password(self):
        user = User.objects.create_user(email="me@example.com", password="Pass123!")
        self.client.force_authenticate(user)

        response = self.client.post(
            "/api/auth/change-password/",
            {"current_password": "nope", "new_password": "Gr4vel-and-Sand!"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("current_password", response.data)


class CreateDefaultAdminCommandTests(TestCase):
    @override_settings(ADMIN_EMAIL="admin@site.example", ADMIN_USERNAME="admin", ADMIN_PASSWORD="Gr4vel-and-Sand!")
    def test_creates_admin_once(self):
        call_command("create_default_admin", stdout=StringIO())
        call_command("create_default_admin", stdout=StringIO())

        admins = User.objects.filter(email="admin@site.example")
        self.assertEqual(admins.count(), 1)
        self.assertEqual(admins.get().role, User.Role.ADMIN)

    @override_settings(ADMIN_EMAIL="", ADMIN_PASSWORD="")
    def test_requires_credentials(self):
        with self.assertRaises(CommandError):
            call_command("create_default_admin", stdout=StringIO())
