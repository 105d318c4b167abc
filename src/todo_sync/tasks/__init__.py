"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, Priority)
- task_store.py: keyed local mirror of the remote collection + key policy
- selection.py: keys ticked for batch deletion
- projection.py: display rows and the priority color table
"""
