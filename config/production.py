import os

from .base import *  # noqa: F401,F403
from .base import _env_bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _env_bool("AUTO_SEED_DB", "0")
