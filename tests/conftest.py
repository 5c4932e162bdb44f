import sys
from pathlib import Path

import pytest


def _ensure_local_package_on_path() -> None:
    root_dir = Path(__file__).resolve().parents[1]
    if str(root_dir) not in sys.path:
        sys.path.insert(0, str(root_dir))


_ensure_local_package_on_path()

from locsync.integrations.translators import clear_fake_services  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_fake_services():
    yield
    clear_fake_services()
