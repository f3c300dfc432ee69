"""Global pytest configuration."""

import os

# Settings are read at import time in a few places; pin them before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.pop("REDIS_URL", None)
