"""Test configuration.

The application reads its configuration when ``src.greenhouse.runtime.context``
is first imported, so the environment is prepared before any project import.
"""

import os
from pathlib import Path

os.environ["APP_ENVIRONMENT"] = "test"
os.environ["CONFIG_FILE"] = str(Path(__file__).resolve().parent.parent / "config.yaml")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FIREBASE_PROJECT_ID"] = "greenhouse-test"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["JWT_ALLOWED_ALGORITHMS"] = "[HS256]"
os.environ["CLIENT_DOMAIN"] = "http://localhost:5173"
os.environ.pop("LOG_FILE", None)

from tests.fixtures import *  # noqa: E402,F401,F403
