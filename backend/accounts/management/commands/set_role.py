"""
Management command to grant or revoke the admin role.

The API never lets a user pick a role, so this is how administrators are
created.

Usage:
    python manage.py set_role asha@geu.ac.in admin
    python manage.py set_role asha@geu.ac.in student
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from accounts.models import User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Set the role (student or admin) of an existing user'

    def add_arguments(self, parser):
        parser.add_argument('email', type=str, help='Email of the user to update')
        parser.add_argument('role', type=str, choices=User.Role.values, help='New role')

    def handle(self, *args, **options):
        email = options['email'].lower().strip()
        role = options['role']

        updated = User.objects.filter(email=email).update(role=role)
        if not updated:
            raise CommandError(f'No user with email {email}')

        logger.info("Role of %s set to %s", email, role)
        self.stdout.write(self.style.SUCCESS(f'{email} is now {role}'))
