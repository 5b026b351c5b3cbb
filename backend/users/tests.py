from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from tasks.priority_engine.projection import Viewer

User = get_user_model()


class CustomUserManagerTests(TestCase):

    def test_create_user_uses_email_as_username(self):
        user = User.objects.create_user(email="nok@EXAMPLE.com", password="pw-12345678")

        self.assertEqual(user.email, "nok@example.com")
        self.assertEqual(user.username, "nok@example.com")
        self.assertTrue(user.check_password("pw-12345678"))
        self.assertEqual(user.role, User.Role.STUDENT)
        self.assertFalse(user.is_staff)

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pw-12345678")

    def test_create_teacher_upper_cases_class_codes(self):
        teacher = User.objects.create_teacher("kru@example.com", "pw-12345678", class_codes=["m4/2", "M5/1"])

        self.assertEqual(teacher.role, User.Role.TEACHER)
        self.assertEqual(teacher.managed_class_codes, ["M4/2", "M5/1"])

    def test_create_superuser_sets_flags(self):
        admin = User.objects.create_superuser("root@example.com", "pw-12345678")

        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)

        with self.assertRaises(ValueError):
            User.objects.create_superuser("bad@example.com", "pw-12345678", is_staff=False)


class AsViewerTests(TestCase):

    def test_student_snapshot(self):
        user = User.objects.create_user(
            email="student@example.com",
            password="pw-12345678",
            grade="M.4/2",
            class_code="M4/2",
            enrollment_status=User.EnrollmentStatus.APPROVED,
        )

        viewer = user.as_viewer()

        self.assertIsInstance(viewer, Viewer)
        self.assertEqual(viewer.id, user.pk)
        self.assertEqual(viewer.class_code, "M4/2")
        self.assertEqual(viewer.enrollment_status, "approved")

    def test_blank_class_code_becomes_none(self):
        user = User.objects.create_user(email="new@example.com", password="pw-12345678")

        self.assertIsNone(user.as_viewer().class_code)


class AuthApiTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="login@example.com", password="pw-12345678", nickname="Ploy")

    def test_login_returns_token_pair(self):
        response = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "login@example.com", "password": "pw-12345678"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_login_with_wrong_password_is_rejected(self):
        response = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "login@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_detail_with_bearer_token(self):
        tokens = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "login@example.com", "password": "pw-12345678"},
            format="json",
        ).data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.client.get(reverse("user_detail"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "login@example.com")
        self.assertEqual(response.data["nickname"], "Ploy")
