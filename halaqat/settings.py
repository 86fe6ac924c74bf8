# halaqat/settings.py
import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-me')
DEBUG = os.getenv('DEBUG', '1') == '1'
ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')

INSTALLED_APPS = [
    # local apps
    'apps.points.apps.PointsConfig',
    'apps.exams.apps.ExamsConfig',
    'apps.progress.apps.ProgressConfig',
]

# SQLite في التطوير: IMMEDIATE حتى تتسلسل عمليات الكتابة بدل فشلها بـ "database is locked"
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
        'OPTIONS': {
            'timeout': int(os.getenv('SQLITE_TIMEOUT', '30')),
            'transaction_mode': 'IMMEDIATE',
        },
        'TEST': {
            # ملف حقيقي (وليس ذاكرة) لأن اختبارات التزامن تفتح اتصالات من عدة threads
            'NAME': str(BASE_DIR / 'test_db.sqlite3'),
        },
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'Africa/Cairo')
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ==============================================================================
# إعدادات النقاط والاختبارات
# ==============================================================================

# أوزان الدرجة النهائية للاختبار (الجزء الحالي / التراكمي) ودرجة النجاح
EXAM_SCORING = {
    'CURRENT_PART_WEIGHT': float(os.getenv('EXAM_CURRENT_PART_WEIGHT', '70')),
    'CUMULATIVE_WEIGHT': float(os.getenv('EXAM_CUMULATIVE_WEIGHT', '30')),
    'PASSING_SCORE': float(os.getenv('EXAM_PASSING_SCORE', '80.0')),
    'POINTS_PER_MISTAKE': float(os.getenv('EXAM_POINTS_PER_MISTAKE', '0.5')),
}

# الحد الأقصى للنقاط اليدوية التي يمنحها المعلم في الجلسة الواحدة
MANUAL_POINTS_BUDGET_PER_SESSION = int(os.getenv('MANUAL_POINTS_BUDGET_PER_SESSION', '20'))
MANUAL_POINTS_MAX_AMOUNT = int(os.getenv('MANUAL_POINTS_MAX_AMOUNT', '10'))

# LOGGING
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': True,
        },
    },
}
