"""
Task subsystem.

Components:
- task_models.py: data structures (Task)
- priority.py: priority escalation + TTL-memoized PriorityEngine
- ranking.py: active/completed ordering consumed by the UI
- priority_refresher.py: periodic re-ranking loop with resume detection
- task_api.py: small high-level helpers used by the rest of the app
"""
