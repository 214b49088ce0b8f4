import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'yardcraft.settings')

import django
django.setup()
from django.conf import settings

CELERY_TASK_ALWAYS_EAGER = getattr(settings, 'CELERY_TASK_ALWAYS_EAGER', False)

# Set broker in constructor so eager mode never reaches for Redis
if CELERY_TASK_ALWAYS_EAGER:
    app = Celery('yardcraft', broker='memory://', backend='cache://')
else:
    app = Celery('yardcraft')

app.config_from_object('django.conf:settings', namespace='CELERY')

# config_from_object may pick up a Redis URL from the environment; pin memory transport after it
if CELERY_TASK_ALWAYS_EAGER:
    app.conf.broker_url = 'memory://'
    app.conf.result_backend = 'cache://'
    app.conf.task_always_eager = True
    app.conf.task_eager_propagates = True
    app.conf.broker_connection_retry_on_startup = False
    app.conf.broker_connection_retry = False
    app.conf.broker_transport = 'memory'

app.autodiscover_tasks()
