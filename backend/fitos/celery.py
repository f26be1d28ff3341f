import os
from celery import Celery

# Set the default Django settings module for 'celery'
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'fitos.settings')

app = Celery('fitos')

# Load settings from Django config, using the CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

# Periodic tasks live in the database (django_celery_beat).
# Run `python manage.py setup_dashboard_schedules` and `setup_crm_schedules`
# once per environment.
