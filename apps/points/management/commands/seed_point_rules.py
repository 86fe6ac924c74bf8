from django.core.management.base import BaseCommand

from apps.points.rules import DEFAULT_RULES, seed_default_rules


class Command(BaseCommand):
    help = "Seed the default point rules for one or more tenants (existing rules are kept)"

    def add_arguments(self, parser):
        parser.add_argument("tenants", nargs="+", help="Tenant (mosque) id(s)")

    def handle(self, *args, **options):
        total = 0
        for tenant_id in options["tenants"]:
            created = seed_default_rules(tenant_id)
            total += created
            if created:
                self.stdout.write(self.style.SUCCESS(f"✅ {tenant_id}: تم إنشاء {created} قاعدة."))
            else:
                self.stdout.write(self.style.WARNING(
                    f"⚠️ {tenant_id}: كل القواعد الافتراضية ({len(DEFAULT_RULES)}) موجودة مسبقاً."
                ))
        self.stdout.write(self.style.SUCCESS(f"Done. Created {total} rule(s)."))
