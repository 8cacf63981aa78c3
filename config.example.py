# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file)
and, if present, from appsettings.json. Do NOT commit real secrets. Use:
- .env (local, gitignored)
- appsettings.json (local, gitignored; keys: StoragePath, MatrixHomeserver, MatrixUserId,
  MatrixAccessToken, MatrixPassword)

Environment variables override values from appsettings.json.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACKER_APP_NAME": "App display name (default: tasktracker).",
    "TASKTRACKER_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKTRACKER_DATA_DIR": "Local data directory (default: .local/tasktracker).",
    "TASKTRACKER_LOG_DIR": "Directory for tasktracker.log (default: <data_dir>).",
    "TASKTRACKER_CONFIG_FILE": "JSON settings file (default: appsettings.json).",
    # Storage
    "TASKTRACKER_STORAGE_PATH": "Reminder JSON file. REQUIRED (or StoragePath in the config file).",
    # Connectors
    "TASKTRACKER_CONSOLE_ENABLED": "Enable console connector (true/false, default: true).",
    "TASKTRACKER_MATRIX_ENABLED": "Enable Matrix connector (default: true if the config file names a homeserver).",
    # Matrix
    "TASKTRACKER_MATRIX_HOMESERVER": "Matrix homeserver URL. Required with Matrix.",
    "TASKTRACKER_MATRIX_USER_ID": "Matrix user ID (bot). Required with Matrix.",
    "TASKTRACKER_MATRIX_ACCESS_TOKEN": "Access token. Required with Matrix unless a password is set.",
    "TASKTRACKER_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TASKTRACKER_MATRIX_DEVICE_ID": "Device ID matching the access token (needed for E2EE).",
    "TASKTRACKER_MATRIX_STORE_PATH": "Matrix session/E2EE store (default: <data_dir>/matrix_store).",
    "TASKTRACKER_MATRIX_ROOMS": "Optional allowlist of room IDs (empty => all rooms).",
    # Scheduler
    "TASKTRACKER_SCHEDULER_INTERVAL_SECONDS": "Seconds between reminder scans (default: 60).",
    "TASKTRACKER_NOTIFY_MAX_ATTEMPTS": "Failed deliveries before a reminder is dropped (default: 5).",
}
