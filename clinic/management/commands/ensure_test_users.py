from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from clinic.models import ApiClient, Doctor, Patient, User

TEST_SET = [
    ("admin1", User.ROLE_ADMIN, "+91-9000000001"),
    ("system1", User.ROLE_SYSTEM, "+91-9000000002"),
    ("doctor1", User.ROLE_DOCTOR, "+91-9000000003"),
    ("patient1", User.ROLE_PATIENT, "+91-9000000004"),
]

TEST_CLIENT = ("TESTAPP", "Test application", "test-api-key")


class Command(BaseCommand):
    help = "Ensure a test API client and test users exist with password=123456 (idempotent)."

    def handle(self, *args, **opts):
        code, name, api_key = TEST_CLIENT
        ApiClient.objects.update_or_create(client_code=code, defaults={"name": name, "api_key": api_key, "is_active": True})
        self.stdout.write(self.style.SUCCESS(f"ok: api client {code} (key {api_key})"))

        for username, role, phone in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "phone": phone, "password": make_password("123456"), "is_active": True},
            )
            if not created:
                # reset password, role and activation
                u.password = make_password("123456")
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            if role == User.ROLE_PATIENT:
                Patient.objects.get_or_create(user=u)
            elif role == User.ROLE_DOCTOR:
                Doctor.objects.get_or_create(user=u)
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
