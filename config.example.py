# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real credentials. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO). The file log always gets DEBUG.",
    "TASKBOARD_CONSOLE_ENABLED": "Run the console shell (true/false, default: true).",
    # Paths (gitignored)
    "TASKBOARD_DATA_DIR": "Local data directory (default: .local/taskboard).",
    "TASKBOARD_STORE_DB_PATH": "Shared store SQLite path (default: <data_dir>/store.sqlite3).",
    "TASKBOARD_KEY_PREFIX": "Namespace for the users/tasks/session keys (default: task_tracker).",
    # Simulated latency
    "TASKBOARD_LOGIN_DELAY_MS": "Delay before login/registration completes (default: 500).",
    "TASKBOARD_WRITE_DELAY_MS": "Delay before task/user writes complete (default: 300).",
    # Seeded admin
    "TASKBOARD_ADMIN_EMAIL": "Seed admin email (default: admin@admin.com).",
    "TASKBOARD_ADMIN_PASSWORD": "Seed admin password (default: admin). Stored as given.",
    "TASKBOARD_ADMIN_NAME": "Seed admin display name (default: System Admin).",
    # Cross-process sync
    "TASKBOARD_WATCH_INTERVAL_SECONDS": "How often to poll the store for other processes' writes (default: 1.0).",
}
