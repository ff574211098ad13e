import datetime

from django.core.management.base import BaseCommand, CommandError

from care.services.reminders import check_medications


class Command(BaseCommand):
    help = "Run one medication reminder sweep (for cron or manual use)."

    def add_arguments(self, parser):
        parser.add_argument('--at', dest='at', default=None,
                            help='Simulate the current time of day, HH:MM[:SS]')

    def handle(self, *args, **options):
        now = None
        if options['at']:
            try:
                now = datetime.time.fromisoformat(options['at'])
            except ValueError:
                raise CommandError(f"invalid --at value: {options['at']!r}")

        result = check_medications(now=now)
        if result is None:
            self.stdout.write(self.style.WARNING("Another sweep is still running; skipped."))
            return
        msg = f"Checked {result.checked} medications at {result.now:%H:%M:%S}: {result.dispatched} reminders sent"
        if result.failures:
            self.stdout.write(self.style.ERROR(f"{msg}, {len(result.failures)} failed"))
        else:
            self.stdout.write(self.style.SUCCESS(msg))
