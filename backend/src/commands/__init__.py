"""Command line entry points for the scheduled maintenance jobs.

- laraflow-trash-cleanup: permanently erase expired trash
- laraflow-task-due-soon: send due-soon reminders
- laraflow-task-overdue: send overdue notices
"""
