"""
todo-sync: a to-do list kept in sync with a remote realtime document store.

Packages:
- tasks/: task records, the keyed local mirror, selection and list projection
- core/: ports, the add/edit dialog model and the list controller
- remote/: remote store implementations (in-memory, local JSON, Firebase REST)
- cli/, connectors/: console entrypoint and REPL
"""

__version__ = "0.1.0"
