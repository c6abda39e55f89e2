import os

from .config import *  # noqa: F401,F403
from .config import db_config_from_env, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env()

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
GOALS_DIR = os.getenv("GOALS_DIR", "instance/test-goals")
AI_API_KEY = ""
