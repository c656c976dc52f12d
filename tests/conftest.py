from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolated_data_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch):
    """Keep crash logs out of the real home directory."""
    monkeypatch.setenv("TINYSH_DATA_HOME", str(tmp_path_factory.mktemp("data_home")))
