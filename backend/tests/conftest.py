"""Root conftest — shared test configuration."""

import os

# Tests never touch a real database or a production signing key
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_FORMAT", "text")
