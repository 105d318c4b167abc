# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo-sync).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Remote store
    "TODO_BACKEND": "firebase | local | memory (default: firebase if a database URL is set, else local).",
    "TODO_DATABASE_URL": "Firebase Realtime Database root URL (FIREBASE_DATABASE_URL also accepted).",
    "TODO_DATABASE_AUTH": "Optional auth token / database secret sent as ?auth=...",
    "TODO_COLLECTION": "Collection path holding the tasks (default: Tasks).",
    "TODO_REQUEST_TIMEOUT_SECONDS": "HTTP timeout for one-shot requests (default: 10).",
    "TODO_STREAM_RECONNECT_SECONDS": "Delay before reopening a dropped event stream (default: 3).",
    # Connectivity gate
    "TODO_CONNECTIVITY_CHECK": "Check the database host is reachable before loading (default: true).",
    "TODO_CONNECTIVITY_TIMEOUT_SECONDS": "Timeout of that check (default: 3).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory for logs and the local store (default: .local/todo-sync).",
    "TODO_LOCAL_STORE_PATH": "JSON file of the local backend (default: <data_dir>/tasks.json).",
}
