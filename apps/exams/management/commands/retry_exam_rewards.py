from django.core.management.base import BaseCommand

from apps.exams.services import pending_reward_exams, retry_pending_reward


class Command(BaseCommand):
    help = "Retry the pass reward of completed, passed exams that have none yet"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", help="Limit to one tenant (mosque) id")

    def handle(self, *args, **options):
        exams = pending_reward_exams(options.get("tenant"))
        if not exams:
            self.stdout.write(self.style.SUCCESS("لا توجد اختبارات بمكافأة معلّقة."))
            return

        awarded = 0
        for exam in exams:
            completion = retry_pending_reward(exam.pk)
            if completion.reward is not None:
                awarded += 1
                self.stdout.write(self.style.SUCCESS(
                    f"✅ exam {exam.pk} ({exam.student_id}, juz {exam.juz_number}): "
                    f"+{completion.reward.amount}"
                ))
            elif completion.reward_error is not None:
                self.stdout.write(self.style.WARNING(
                    f"⚠️ exam {exam.pk}: المكافأة ما زالت معلّقة ({completion.reward_error})"
                ))

        self.stdout.write(self.style.SUCCESS(
            f"Done. Awarded {awarded} of {len(exams)} pending reward(s)."
        ))
