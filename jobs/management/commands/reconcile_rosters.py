from django.core.management.base import BaseCommand, CommandError

from gradebooks.models import Gradebook, GradebookStatus
from gradebooks.roster import reconcile_roster
from jobs.tasks import reconcile_roster_job


class Command(BaseCommand):
    help = "Enroll matching trainees into draft gradebooks that have no trainees yet"

    def add_arguments(self, parser):
        parser.add_argument("--gradebook", type=int, help="Only this gradebook id")
        parser.add_argument(
            "--enqueue",
            action="store_true",
            help="Queue each batch on the rq 'default' queue instead of running inline",
        )

    def handle(self, *args, **opts):
        qs = Gradebook.objects.filter(status=GradebookStatus.DRAFT, enrollments__isnull=True).distinct()
        if opts.get("gradebook"):
            qs = Gradebook.objects.filter(pk=opts["gradebook"])
            if not qs.exists():
                raise CommandError(f"Gradebook {opts['gradebook']} not found")
        ids = list(qs.order_by("id").values_list("id", flat=True))
        if not ids:
            self.stdout.write("No gradebooks need a roster batch.")
            return
        for gradebook_id in ids:
            if opts["enqueue"]:
                reconcile_roster_job.delay(gradebook_id)
                self.stdout.write(f"Queued gradebook {gradebook_id}")
            else:
                created = reconcile_roster(gradebook_id)
                self.stdout.write(self.style.SUCCESS(f"Gradebook {gradebook_id}: enrolled {created} trainee(s)"))
