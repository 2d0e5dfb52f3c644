import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from phase_dispatch.events import EventDispatcher, reset_event_dispatcher  # noqa: E402


@pytest.fixture
def dispatcher():
    d = EventDispatcher()
    yield d
    d.dispose()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    # Keep user config files and PD_* variables out of the tests
    for key in ("PD_DEBUG", "PD_ISOLATE_LISTENER_ERRORS", "PD_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PD_SETTINGS_FILE", str(tmp_path / "missing-settings.toml"))
    reset_event_dispatcher()
    yield
    reset_event_dispatcher()
