"""Tests for configuration loading and API key storage."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from yomitore.config import YomitoreConfig, load_api_key, save_api_key
from yomitore.exceptions import ConfigurationError


class TestFromEnv:
    """Tests for YomitoreConfig.from_env."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("YOMITORE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("YOMITORE_CHAT_MODEL", "some/model")
        monkeypatch.setenv("YOMITORE_REQUEST_TIMEOUT", "5")
        monkeypatch.setenv("GROQ_API_KEY", "gsk-env")

        config = YomitoreConfig.from_env(env_file=tmp_path / "missing.env")

        assert config.data_dir == tmp_path
        assert config.chat_model == "some/model"
        assert config.request_timeout == 5
        assert config.api_key == "gsk-env"
        assert config.to_dict()["api"]["api_key_set"] is True

    def test_reads_env_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.delenv("YOMITORE_CHAT_MODEL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("YOMITORE_CHAT_MODEL=from/dotenv\n")

        try:
            config = YomitoreConfig.from_env(env_file=env_file)
        finally:
            # load_dotenv writes os.environ directly
            os.environ.pop("YOMITORE_CHAT_MODEL", None)

        assert config.chat_model == "from/dotenv"

    def test_bad_timeout(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("YOMITORE_REQUEST_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError):
            YomitoreConfig.from_env(env_file=tmp_path / "missing.env")


class TestApiKeyStorage:
    """Tests for save_api_key / load_api_key."""

    def test_round_trip(self, tmp_path: Path):
        config = YomitoreConfig(data_dir=tmp_path / "cfg")

        assert load_api_key(config) is None
        save_api_key(config, "gsk-stored")

        assert load_api_key(config) == "gsk-stored"
        if os.name == "posix":
            assert config.config_file.stat().st_mode & 0o777 == 0o600

    @pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
    def test_existing_readable_file_is_restricted(self, tmp_path: Path):
        config = YomitoreConfig(data_dir=tmp_path)
        config.config_file.write_text("api_key: old\n")
        os.chmod(config.config_file, 0o644)

        save_api_key(config, "gsk-new")

        assert config.config_file.stat().st_mode & 0o777 == 0o600
        assert load_api_key(config) == "gsk-new"

    def test_invalid_yaml(self, tmp_path: Path):
        config = YomitoreConfig(data_dir=tmp_path)
        config.config_file.write_text("api_key: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_api_key(config)
