import pytest


@pytest.fixture
def write_pair(tmp_path):
    """Write <name>.transfer.list + <name>.new.dat into tmp_path, return their paths."""

    def _write(manifest: str, data: bytes, name: str = "system"):
        tl = tmp_path / f"{name}.transfer.list"
        dat = tmp_path / f"{name}.new.dat"
        tl.write_text(manifest)
        dat.write_bytes(data)
        return tl, dat

    return _write


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the user's real config file."""
    monkeypatch.setenv("SDAT2IMG_CONFIG", str(tmp_path / "cfg" / "config.json"))
