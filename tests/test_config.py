"""
Tests for configuration resolution: source priority, flag overrides, env fallbacks.

Run with:
    pytest tests/test_config.py -v
"""

import dataclasses
import json

import pytest

from acommit.cli.args import parse_args
from acommit.config import (
    Config, ConfigError, ConfigResolver, ProviderSettings,
    example_config, load_config_file, mask_secret, save_config,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dirs(tmp_path):
    """Separate working and home directories."""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    return work, home


@pytest.fixture
def make_resolver(dirs):
    def _make(env=None):
        work, home = dirs
        return ConfigResolver(env=env or {}, cwd=work, home=home)
    return _make


def write_config(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


# ---------------------------------------------------------------------------
# Source priority
# ---------------------------------------------------------------------------

class TestSourcePriority:
    """explicit file > env-pointed file > auto-detected file > defaults"""

    def test_defaults_when_nothing_found(self, make_resolver):
        config = make_resolver().resolve(parse_args([]))
        assert config.source is None
        assert config.provider == "ollama"
        assert config.settings.model == "llama3.2:3b"
        assert config.settings.url == "http://localhost:11434"
        assert config.verbose is False

    def test_home_file_used_when_no_local_file(self, make_resolver, dirs):
        _, home = dirs
        path = write_config(home / ".acommit.json", {"default_provider": "openai"})
        config = make_resolver().resolve(parse_args([]))
        assert config.source == path
        assert config.provider == "openai"

    def test_local_file_beats_home_file(self, make_resolver, dirs):
        work, home = dirs
        write_config(home / ".acommit.json", {"default_provider": "openai"})
        local = write_config(work / ".acommit.json", {"default_provider": "gemini"})
        config = make_resolver().resolve(parse_args([]))
        assert config.source == local
        assert config.provider == "gemini"

    def test_env_pointed_file_beats_auto_detected(self, make_resolver, dirs, tmp_path):
        work, _ = dirs
        write_config(work / ".acommit.json", {"default_provider": "gemini"})
        env_file = write_config(tmp_path / "env.json", {"default_provider": "openai"})
        config = make_resolver({"ACOMMIT_CONFIG": str(env_file)}).resolve(parse_args([]))
        assert config.source == env_file
        assert config.provider == "openai"

    def test_explicit_file_beats_env_pointed(self, make_resolver, tmp_path):
        env_file = write_config(tmp_path / "env.json", {"default_provider": "openai"})
        explicit = write_config(tmp_path / "explicit.json", {"default_provider": "gemini"})
        resolver = make_resolver({"ACOMMIT_CONFIG": str(env_file)})
        config = resolver.resolve(parse_args(["--config", str(explicit)]))
        assert config.source == explicit
        assert config.provider == "gemini"


# ---------------------------------------------------------------------------
# Failures: explicit sources never fall back
# ---------------------------------------------------------------------------

class TestConfigErrors:

    def test_explicit_missing_file(self, make_resolver, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            make_resolver().resolve(parse_args(["--config", str(tmp_path / "nope.json")]))

    def test_explicit_malformed_file(self, make_resolver, tmp_path):
        path = write_config(tmp_path / "bad.json", "not valid json {{{")
        with pytest.raises(ConfigError, match="not valid JSON"):
            make_resolver().resolve(parse_args(["--config", str(path)]))

    def test_explicit_file_must_be_object(self, make_resolver, tmp_path):
        path = write_config(tmp_path / "list.json", ["ollama"])
        with pytest.raises(ConfigError, match="JSON object"):
            make_resolver().resolve(parse_args(["--config", str(path)]))

    def test_env_pointed_missing_file(self, make_resolver, tmp_path):
        resolver = make_resolver({"ACOMMIT_CONFIG": str(tmp_path / "gone.json")})
        with pytest.raises(ConfigError):
            resolver.resolve(parse_args([]))

    def test_malformed_auto_detected_file_falls_through(self, make_resolver, dirs, capsys):
        work, home = dirs
        write_config(work / ".acommit.json", "{broken")
        home_file = write_config(home / ".acommit.json", {"default_provider": "openai"})

        config = make_resolver().resolve(parse_args([]))

        assert config.source == home_file
        assert "Config warning" in capsys.readouterr().err

    def test_load_config_file_reads_object(self, tmp_path):
        path = write_config(tmp_path / "ok.json", {"verbose": True})
        assert load_config_file(path) == {"verbose": True}


# ---------------------------------------------------------------------------
# Provider selection and overrides
# ---------------------------------------------------------------------------

class TestProviderSelection:

    def test_gemini_env_key_selects_gemini_without_file(self, make_resolver):
        config = make_resolver({"GEMINI_API_KEY": "g-key"}).resolve(parse_args([]))
        assert config.provider == "gemini"
        assert config.settings.api_key == "g-key"
        assert config.settings.model == "gemini-2.5-flash-lite"

    def test_file_provider_wins_over_gemini_env(self, make_resolver, dirs):
        work, _ = dirs
        write_config(work / ".acommit.json", {"default_provider": "ollama"})
        config = make_resolver({"GEMINI_API_KEY": "g-key"}).resolve(parse_args([]))
        assert config.provider == "ollama"
        # Key still filled in for the inactive provider
        assert config.gemini.api_key == "g-key"

    @pytest.mark.parametrize("argv, expected", [
        (["--openai", "http://localhost:8080/v1"], "openai"),
        (["-ou", "http://server:11434"], "ollama"),
        (["--ollama-url", "http://server:11434"], "ollama"),
        (["-gk", "abc"], "gemini"),
        (["--gemini-key", "abc"], "gemini"),
    ])
    def test_provider_inferred_from_flags(self, make_resolver, argv, expected):
        config = make_resolver().resolve(parse_args(argv))
        assert config.provider == expected

    def test_provider_flag_beats_inferred(self, make_resolver):
        argv = ["--provider", "ollama", "--gemini-key", "abc"]
        config = make_resolver().resolve(parse_args(argv))
        assert config.provider == "ollama"
        assert config.gemini.api_key == "abc"

    def test_provider_flag_beats_file(self, make_resolver, dirs):
        work, _ = dirs
        write_config(work / ".acommit.json", {"default_provider": "gemini"})
        config = make_resolver().resolve(parse_args(["--provider", "openai"]))
        assert config.provider == "openai"


class TestFieldOverrides:

    def test_model_flag_applies_to_active_provider_only(self, make_resolver):
        config = make_resolver().resolve(parse_args(["-m", "codellama:7b"]))
        assert config.ollama.model == "codellama:7b"
        assert config.gemini.model == "gemini-2.5-flash-lite"

    def test_flags_override_file_values(self, make_resolver, tmp_path):
        path = write_config(tmp_path / "c.json", {
            "default_provider": "openai",
            "openai": {"url": "http://file/v1", "api_key": "file-key", "model": "file-model"},
        })
        argv = ["--config", str(path), "--openai-key", "flag-key", "--model", "flag-model"]
        config = make_resolver().resolve(parse_args(argv))
        assert config.settings.url == "http://file/v1"
        assert config.settings.api_key == "flag-key"
        assert config.settings.model == "flag-model"

    def test_openai_key_from_env(self, make_resolver):
        config = make_resolver({"OPENAI_API_KEY": "sk-env"}).resolve(
            parse_args(["--openai", "http://localhost:8080/v1/"])
        )
        assert config.settings.api_key == "sk-env"
        assert config.settings.url == "http://localhost:8080/v1"

    def test_file_key_beats_env_key(self, make_resolver, tmp_path):
        path = write_config(tmp_path / "c.json", {"gemini": {"api_key": "from-file"}})
        resolver = make_resolver({"GEMINI_API_KEY": "from-env"})
        config = resolver.resolve(parse_args(["--config", str(path), "--provider", "gemini"]))
        assert config.settings.api_key == "from-file"

    def test_openai_key_optional(self, make_resolver):
        config = make_resolver().resolve(parse_args(["--openai", "http://localhost:8080/v1"]))
        assert config.settings.api_key is None

    def test_verbose_flag(self, make_resolver):
        assert make_resolver().resolve(parse_args(["--verbose"])).verbose is True

    def test_verbose_from_file(self, make_resolver, dirs):
        work, _ = dirs
        write_config(work / ".acommit.json", {"verbose": True})
        assert make_resolver().resolve(parse_args([])).verbose is True


# ---------------------------------------------------------------------------
# Config value
# ---------------------------------------------------------------------------

class TestConfig:

    def test_is_immutable(self):
        config = Config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.provider = "gemini"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"default_provider": "gemini", "unknown_key": "value"})
        assert config.provider == "gemini"

    def test_from_dict_invalid_provider_warns(self, capsys):
        config = Config.from_dict({"default_provider": "claude"})
        assert config.provider == "ollama"
        assert "Config warning" in capsys.readouterr().err

    @pytest.mark.parametrize("data", [
        {"timeout": -5},
        {"timeout": "soon"},
        {"verbose": "yes"},
        {"gemini": "not-an-object"},
        {"ollama": {"model": ""}},
    ])
    def test_from_dict_bad_values_fall_back(self, data, capsys):
        config = Config.from_dict(data)
        assert config.timeout == 120
        assert config.verbose is False
        assert config.ollama.model == "llama3.2:3b"
        assert "Config warning" in capsys.readouterr().err

    def test_url_trailing_slash_stripped(self):
        config = Config.from_dict({"ollama": {"url": "http://box:11434/"}})
        assert config.ollama.url == "http://box:11434"

    def test_save_and_load_roundtrip(self, tmp_path):
        original = Config(
            provider="openai",
            openai=ProviderSettings(model="gpt-4o-mini", url="http://x/v1", api_key="sk"),
        )
        path = save_config(original, tmp_path / "nested" / "c.json")
        loaded = Config.from_dict(load_config_file(path), source=path)
        assert loaded.provider == "openai"
        assert loaded.openai == original.openai
        assert loaded.ollama == original.ollama

    def test_example_config_is_loadable(self, capsys):
        config = Config.from_dict(example_config())
        assert config.provider == "ollama"
        assert config.gemini.api_key
        assert capsys.readouterr().err == ""


class TestMaskSecret:

    @pytest.mark.parametrize("value, expected", [
        (None, "(not set)"),
        ("", "(not set)"),
        ("short", "*****"),
        ("sk-1234567890abcd", "sk-1...abcd"),
    ])
    def test_mask(self, value, expected):
        assert mask_secret(value) == expected
