import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Settings.from_env must not pick up the developer's shell configuration.
    for name in ("OWL_DIAGNOSTICS", "OWL_MAX_DEPTH", "OWL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
