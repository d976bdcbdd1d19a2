"""
Square 15 - Celery Configuration

Celery configuration for background task processing.
Uses Redis as the message broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings


# Create Celery app
celery_app = Celery(
    'square15',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['app.tasks.celery_tasks'],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Timezone
    timezone=settings.scheduler_timezone,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=900,  # 15 minutes
    task_soft_time_limit=840,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=86400,  # 24 hours

    # Beat schedule for periodic tasks
    beat_schedule={
        # Once a day; the sweep decides who is due
        'run-monthly-salary-sweep': {
            'task': 'app.tasks.celery_tasks.run_monthly_salary_sweep_task',
            'schedule': crontab(
                hour=settings.salary_sweep_hour,
                minute=settings.salary_sweep_minute,
            ),
        },
    },
)


celery_app.conf.task_routes = {
    'app.tasks.celery_tasks.*': {'queue': 'default'},
}
