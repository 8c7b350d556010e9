import time

from django.core.management.base import BaseCommand

from clinic.ehr.analytics import EHRQueueWorker
from clinic.ehr.injector import get_fhir_store


class Command(BaseCommand):
    help = "Forward queued clinical records to the EHR store (retries with exponential back-off)."

    def add_arguments(self, parser):
        parser.add_argument("--batch-size", type=int, default=None)
        parser.add_argument("--provider", default=None, help="FHIR store provider; defaults to EHR_PROVIDER")
        parser.add_argument("--loop", action="store_true", help="keep polling instead of a single pass")
        parser.add_argument("--interval", type=float, default=10.0, help="seconds between passes with --loop")

    def handle(self, *args, **opts):
        worker = EHRQueueWorker(get_fhir_store(opts["provider"]))
        while True:
            stats = worker.process(opts["batch_size"])
            self.stdout.write(self.style.SUCCESS(
                f"done={stats['done']} retry={stats['retry']} failed={stats['failed']}"))
            if not opts["loop"]:
                break
            time.sleep(opts["interval"])
