"""Background workers module.

Hosts the Celery application and the beat schedule running the trash
retention sweep (daily) and the deadline notifiers (hourly).
"""
