import os
from celery import Celery

os.environ.setdefault(
    'DJANGO_SETTINGS_MODULE',
    'review_platform.settings'
)

app = Celery('review_platform')
# Read settings from Django settings, using CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')
# Picks up movies.tasks
app.autodiscover_tasks()
