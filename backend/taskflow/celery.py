"""
Celery application for the taskflow project.

Maintenance jobs live in ``tasks.jobs`` and are scheduled through
``CELERY_BEAT_SCHEDULE`` in the Django settings.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'taskflow.settings')

app = Celery('taskflow')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks(['tasks'], related_name='jobs')
