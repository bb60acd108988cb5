import os

from .base import *  # noqa: F401,F403
from .base import DB_CONFIG, _env_bool

SECRET_KEY = "test-secret"

DB_CONFIG = dict(DB_CONFIG, database=os.getenv("DB_NAME", "hrm_test_db"))

DEBUG = False
TESTING = True

# A release below zero is a sequencing bug; fail loudly under test.
STRICT_BALANCE_RELEASE = True

AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _env_bool("AUTO_SEED_DB", "0")
