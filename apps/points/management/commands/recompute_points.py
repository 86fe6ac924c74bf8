from django.core.management.base import BaseCommand, CommandError

from apps.points.ledger import recompute_total
from apps.points.models import PointTransaction, StudentAggregate


class Command(BaseCommand):
    help = "Rebuild student point totals from the non-reversed ledger transactions"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", help="Limit to one tenant (mosque) id")
        parser.add_argument("--student", help="Limit to one student id (requires --tenant)")

    def _targets(self, tenant_id, student_id):
        if student_id:
            return [(tenant_id, student_id)]
        pairs = set()
        for model in (PointTransaction, StudentAggregate):
            qs = model.objects.all()
            if tenant_id:
                qs = qs.filter(tenant_id=tenant_id)
            pairs.update(qs.values_list("tenant_id", "student_id").distinct())
        return sorted(pairs)

    def handle(self, *args, **options):
        tenant_id = options.get("tenant")
        student_id = options.get("student")
        if student_id and not tenant_id:
            raise CommandError("--student requires --tenant")

        fixed = 0
        targets = self._targets(tenant_id, student_id)
        for tenant, student in targets:
            before = (
                StudentAggregate.objects.filter(tenant_id=tenant, student_id=student)
                .values_list("total_points", flat=True)
                .first()
            )
            total = recompute_total(student, tenant)
            if before is not None and before != total:
                fixed += 1
                self.stdout.write(self.style.WARNING(
                    f"🔄 {tenant}/{student}: {before} => {total}"
                ))

        self.stdout.write(self.style.SUCCESS(
            f"Done. Recomputed {len(targets)} student total(s), corrected {fixed}."
        ))
