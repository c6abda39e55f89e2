"""Settings shared by every environment module.

Values come from environment variables (``.env`` is loaded by ``create_app``).
"""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "attendance_tracker"),
    }


AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_API_KEY = os.getenv("AI_API_KEY", "")
AI_MODEL = os.getenv("AI_MODEL", "google/gemini-2.5-flash")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))

GOALS_DIR = os.getenv("GOALS_DIR", "instance/goals")

REMINDER_TIME = os.getenv("REMINDER_TIME", "18:30")
REMINDER_TIMEZONE = os.getenv("REMINDER_TIMEZONE", "Asia/Kolkata")
