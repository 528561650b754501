import sys
import threading
from pathlib import Path

import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from db import connection  # noqa: E402
from tests.fakes import FakePool  # noqa: E402


@pytest.fixture()
def fake_pool(monkeypatch):
    """Replace the module-level pool with an in-memory fake (two slots)."""
    fake = FakePool()
    monkeypatch.setattr(connection, "_pool", fake)
    monkeypatch.setattr(connection, "_slots", threading.BoundedSemaphore(2))
    return fake
