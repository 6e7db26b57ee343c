"""Tests for settings and the user .env helpers."""

from core.config import AppSettings, _parse_env_lines, get_user_env_file, write_user_env_vars


class TestAppSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GEOCHECK_BASE_URL", "http://geo.test:9000/")
        monkeypatch.setenv("GEOCHECK_API_KEY", "secret")
        settings = AppSettings()
        assert settings.endpoint_url == "http://geo.test:9000/api/web/location/convert"
        assert settings.api_key == "secret"

    def test_endpoint_url_joins_slashes(self):
        settings = AppSettings(base_url="http://geo.test", endpoint_path="convert")
        assert settings.endpoint_url == "http://geo.test/convert"


class TestUserEnvFile:
    def test_write_merges_existing_values(self, tmp_path):
        env_path = tmp_path / "cfg" / ".env"
        write_user_env_vars({"GEOCHECK_BASE_URL": "http://a.test"}, env_path=env_path)
        write_user_env_vars({"GEOCHECK_API_KEY": "k"}, env_path=env_path)

        values = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        assert values == {"GEOCHECK_API_KEY": "k", "GEOCHECK_BASE_URL": "http://a.test"}

    def test_parse_skips_comments_and_quotes(self):
        text = '# comment\nGEOCHECK_USER_AGENT="geocheck/test"\nnot-a-pair\n'
        assert _parse_env_lines(text) == {"GEOCHECK_USER_AGENT": "geocheck/test"}


def test_config_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("GEOCHECK_CONFIG_DIR", str(tmp_path / "cfg"))
    assert get_user_env_file() == tmp_path / "cfg" / ".env"
