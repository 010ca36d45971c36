# config.py
import os

DATA_DIR = os.environ.get("EXPENSE_TRACKER_DATA_DIR", "expense_data")

PROJECTS_KEY = "projects"
CURRENT_PROJECT_KEY = "lastProjectId"

CURRENCY = os.environ.get("EXPENSE_TRACKER_CURRENCY", "CHF")

# seconds to wait for the storage lock
LOCK_TIMEOUT = float(os.environ.get("EXPENSE_TRACKER_LOCK_TIMEOUT", "5"))
