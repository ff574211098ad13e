from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from care.services.diseases import import_icd_codes


class Command(BaseCommand):
    help = "Load the ICD disease catalogue from a text file ('CODE name' per line)."

    def add_arguments(self, parser):
        parser.add_argument('path')
        parser.add_argument('--batch-size', type=int, default=None)

    def handle(self, *args, **options):
        path = Path(options['path'])
        if not path.is_file():
            raise CommandError(f"file not found: {path}")
        with path.open(encoding='utf-8', errors='ignore') as fh:
            result = import_icd_codes(fh, batch_size=options['batch_size'])
        self.stdout.write(self.style.SUCCESS(f"Read {result['read']} lines, created {result['created']} diseases"))
