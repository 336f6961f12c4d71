import sys
from pathlib import Path
import pytest

# Ensure project root is on sys.path for imports like `from core...`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # Keep metrics out of data/ and reload the catalog for every test
    monkeypatch.setenv("MOVIE_BOT_DB_PATH", str(tmp_path / "metrics.sqlite"))
    monkeypatch.delenv("MOVIE_BOT_DATA_PATH", raising=False)
    monkeypatch.delenv("HF_API_TOKEN", raising=False)
    monkeypatch.delenv("HF_API_URL", raising=False)
    from core.catalog import get_catalog
    get_catalog.cache_clear()
    yield
    get_catalog.cache_clear()
