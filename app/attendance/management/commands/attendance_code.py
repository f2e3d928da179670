from django.core.management.base import BaseCommand, CommandError

from attendance.models import Attendance
from attendance.services.codes import generate_code, hash_code


class Command(BaseCommand):
    help = "Regenerate the check-in code of an attendance session and print it"

    def add_arguments(self, parser):
        parser.add_argument("--attendance", type=int, help="Attendance session id")
        parser.add_argument("--event", type=int, help="Calendar event id")
        parser.add_argument("--length", type=int, default=None, help="Code length (6-10)")

    def handle(self, *args, **options):
        attendance_id = options.get("attendance")
        event_id = options.get("event")

        if not attendance_id and not event_id:
            raise CommandError("Provide --attendance or --event")

        queryset = Attendance.objects.select_related("event")
        if attendance_id:
            attendance = queryset.filter(pk=attendance_id).first()
        else:
            attendance = queryset.filter(event_id=event_id).first()

        if attendance is None:
            lookup = f"attendance={attendance_id or '-'} event={event_id or '-'}"
            raise CommandError(f"Attendance session not found ({lookup})")

        if attendance.is_cancelled:
            self.stderr.write(self.style.WARNING("This attendance session is cancelled; check-ins will be refused."))

        code = generate_code(options.get("length"))
        attendance.code_hash = hash_code(code)
        attendance.save(update_fields=["code_hash", "updated_at"])

        self.stdout.write(
            self.style.SUCCESS(
                f"New code for '{attendance.event.title}' (attendance={attendance.id}): {code}"
            )
        )
