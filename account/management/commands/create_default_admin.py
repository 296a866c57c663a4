from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from account.models import User


class Command(BaseCommand):
    help = 'Create the default admin user from ADMIN_EMAIL / ADMIN_USERNAME / ADMIN_PASSWORD if it does not exist'

    def handle(self, *args, **options):
        email = settings.ADMIN_EMAIL
        username = settings.ADMIN_USERNAME
        password = settings.ADMIN_PASSWORD

        if not email or not password:
            raise CommandError("ADMIN_EMAIL and ADMIN_PASSWORD must be set")

        if User.objects.filter(email__iexact=email).exists():
            self.stdout.write(f"Admin user {email} already exists")
            return

        User.objects.create_superuser(email=email, password=password, username=username)
        self.stdout.write(self.style.SUCCESS(f"Created admin user {email}"))
