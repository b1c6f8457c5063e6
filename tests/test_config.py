import json

import pytest

from bookmarkd.auth import get_access_token, get_default_owner
from bookmarkd.config import get_config_path, get_database_path, get_sync_cooldown_ms, load_config, load_settings
from bookmarkd.fetcher import BookmarkSource, EnrichmentSource
from bookmarkd.processor import SyncOrchestrator


def test_load_config_merges_user_file_and_env(monkeypatch):
    path = get_config_path()
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"feed": {"max_limit": 20}, "sync": {"max_pages": 3}}))
    monkeypatch.setenv("BOOKMARKD_SYNC_COOLDOWN_MINUTES", "0.5")

    config = load_config()

    assert config["feed"] == {"default_limit": 50, "max_limit": 20}
    assert config["sync"]["max_pages"] == 3
    assert config["sync"]["item_delay_seconds"] == 0.15
    assert get_sync_cooldown_ms(config) == 30_000

    settings = load_settings()
    assert settings.sync.max_pages == 3
    assert settings.enrichment.retry_attempts == 2


def test_from_config_constructors_read_validated_settings(tmp_path):
    config = {
        "sync": {"item_delay_seconds": "0", "full_page_size": 80},
        "enrichment": {"retry_attempts": 4, "timeout_seconds": 2},
        "source": {"api_base": "https://api.example.test/2/"},
    }

    orchestrator = SyncOrchestrator.from_config(config, tmp_path / "db.sqlite", "token")
    assert orchestrator.item_delay == 0.0
    assert orchestrator.full_page_size == 80
    assert orchestrator.incremental_page_size == 50
    assert orchestrator.retry_attempts == 4
    assert orchestrator.retry_delay == 0.2

    assert isinstance(orchestrator.source, BookmarkSource)
    assert orchestrator.source.api_base == "https://api.example.test/2"
    assert orchestrator.source.timeout == 30.0
    assert isinstance(orchestrator.enrichment, EnrichmentSource)
    assert orchestrator.enrichment.timeout == 2.0
    assert orchestrator.enrichment.base_url == "https://api.fxtwitter.com"

    assert get_sync_cooldown_ms({}) == 60 * 60 * 1000

def test_database_path_follows_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("BOOKMARKD_DATA_DIR", str(tmp_path / "elsewhere"))
    assert get_database_path() == tmp_path / "elsewhere" / "bookmarkd.db"


def test_access_token_lookup_order(monkeypatch, tmp_path):
    tokens = tmp_path / "tokens.json"
    tokens.write_text(json.dumps({"owner-a": "from-file"}))

    assert get_access_token("owner-a", tokens_path=tokens) == "from-file"

    monkeypatch.setenv("BOOKMARKD_ACCESS_TOKEN", "shared")
    assert get_access_token("owner-a", tokens_path=tokens) == "shared"

    monkeypatch.setenv("BOOKMARKD_ACCESS_TOKEN_OWNER_A", "per-owner")
    assert get_access_token("owner-a", tokens_path=tokens) == "per-owner"


def test_access_token_missing_raises(tmp_path):
    with pytest.raises(ValueError, match="nobody"):
        get_access_token("nobody", tokens_path=tmp_path / "missing.json")


def test_default_owner_from_home_env_file(monkeypatch, tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    (home / ".env").write_text('export BOOKMARKD_OWNER_ID="owner-z"\n')
    assert get_default_owner() == "owner-z"
