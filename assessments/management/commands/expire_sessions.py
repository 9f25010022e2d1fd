from django.core.management.base import BaseCommand

from assessments.lifecycle import expire_overdue_sessions


class Command(BaseCommand):
    help = 'Submits every in-progress test session whose time limit has run out'

    def handle(self, *args, **options):
        expired = expire_overdue_sessions()
        if expired:
            self.stdout.write(self.style.SUCCESS(f"Expired {len(expired)} session(s): {', '.join(map(str, expired))}"))
        else:
            self.stdout.write("No overdue sessions.")
