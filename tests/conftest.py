"""Test environment: SQLite in memory, local blob store in a temp dir, fixed signing secret.

Set before any bugtracker module is imported, since settings load at import time.
"""

import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-signing-secret-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOB_BACKEND", "local")
os.environ.setdefault("BLOB_LOCAL_ROOT", tempfile.mkdtemp(prefix="bugtracker-blobs-"))
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "100000")
