"""
Tests for environment-driven settings.
"""
from claimdesk.config import DEFAULT_LOG_FORMAT, Settings, get_settings
from claimdesk.repository.claim_store import InMemoryClaimRepository, JsonFileClaimRepository, build_claim_store


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CLAIMDESK_LOG_LEVEL", "CLAIMDESK_LOG_FORMAT", "CLAIMDESK_API_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.log_level == "INFO"
        assert settings.log_format == DEFAULT_LOG_FORMAT
        assert settings.store_path is None
        assert settings.api_url == "http://localhost:8000"

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLAIMDESK_LOG_LEVEL", "debug")
        monkeypatch.setenv("CLAIMDESK_STORE_PATH", str(tmp_path / "claims.json"))
        monkeypatch.setenv("CLAIMDESK_LATENCY_SCALE", "0.25")
        monkeypatch.setenv("CLAIMDESK_API_URL", "http://api.local:9000/")

        settings = Settings.from_env()

        assert settings.log_level == "DEBUG"
        assert settings.store_path.endswith("claims.json")
        assert settings.latency_scale == 0.25
        assert settings.api_url == "http://api.local:9000"

    def test_bad_latency_scale(self, monkeypatch):
        monkeypatch.setenv("CLAIMDESK_LATENCY_SCALE", "fast")
        assert Settings.from_env().latency_scale == 1.0
        monkeypatch.setenv("CLAIMDESK_LATENCY_SCALE", "-3")
        assert Settings.from_env().latency_scale == 0.0

    def test_cached(self):
        assert get_settings() is get_settings()


class TestBuildClaimStore:
    def test_memory_by_default(self):
        store = build_claim_store(Settings())
        assert isinstance(store.repository, InMemoryClaimRepository)

    def test_json_file_when_path_set(self, tmp_path):
        store = build_claim_store(Settings(store_path=str(tmp_path / "claims.json")))
        assert isinstance(store.repository, JsonFileClaimRepository)
