"""
Entity subsystem (users, tasks, submissions).

Components:
- models.py: data structures (User, Task, Submission, UserRole, TaskStatus)
- lifecycle.py: the task status state machine and lateness rule
- repository.py: CRUD over the Users and Tasks collections
- queries.py: read-only aggregates used by dashboards
"""
