"""
Configuration Package

Resolves the provider, model and credentials for a run. Sources are tried
in order and the first one found wins:

1. --config PATH
2. ACOMMIT_CONFIG environment variable
3. .acommit.json in the current directory, then in the home directory
4. Built-in defaults (Ollama at localhost:11434, llama3.2:3b)

Individual flags (--provider, --model, keys, urls) are applied on top of
whichever source was picked.
"""

import json
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

VALID_PROVIDERS = ("gemini", "ollama", "openai")

CONFIG_FILENAME = ".acommit.json"
CONFIG_ENV_VAR = "ACOMMIT_CONFIG"

# Credential fallbacks per provider
API_KEY_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}

DEFAULT_PROVIDER = "ollama"
DEFAULT_TIMEOUT = 120


class ConfigError(Exception):
    """Raised when an explicitly named config file can't be used."""
    pass


@dataclass(frozen=True)
class ProviderSettings:
    """Model, endpoint and credential for one provider."""
    model: str
    url: Optional[str] = None
    api_key: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if v is not None}


DEFAULT_SETTINGS = {
    "gemini": ProviderSettings(
        model="gemini-2.5-flash-lite",
        url="https://generativelanguage.googleapis.com/v1beta",
    ),
    "ollama": ProviderSettings(model="llama3.2:3b", url="http://localhost:11434"),
    "openai": ProviderSettings(model="gpt-3.5-turbo", url="https://api.openai.com/v1"),
}


@dataclass(frozen=True)
class Config:
    """Resolved configuration for one run. Built once, never mutated."""
    provider: str = DEFAULT_PROVIDER
    verbose: bool = False
    timeout: int = DEFAULT_TIMEOUT
    gemini: ProviderSettings = field(default_factory=lambda: DEFAULT_SETTINGS["gemini"])
    ollama: ProviderSettings = field(default_factory=lambda: DEFAULT_SETTINGS["ollama"])
    openai: ProviderSettings = field(default_factory=lambda: DEFAULT_SETTINGS["openai"])
    source: Optional[Path] = None

    @property
    def settings(self) -> ProviderSettings:
        """Settings of the active provider."""
        return getattr(self, self.provider)

    def to_dict(self) -> dict:
        """Config file shape (no source path)."""
        data = {
            "default_provider": self.provider,
            "verbose": self.verbose,
            "timeout": self.timeout,
        }
        for name in VALID_PROVIDERS:
            data[name] = getattr(self, name).to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict, source: Optional[Path] = None) -> 'Config':
        """Build a Config from parsed file data.

        Bad values are reported on stderr and replaced with defaults, the
        same way for every source.
        """
        warnings = []
        kwargs = {"source": source}

        provider = data.get("default_provider", DEFAULT_PROVIDER)
        if provider in VALID_PROVIDERS:
            kwargs["provider"] = provider
        else:
            warnings.append(f"Invalid default_provider '{provider}', using '{DEFAULT_PROVIDER}'")

        verbose = data.get("verbose", False)
        if isinstance(verbose, bool):
            kwargs["verbose"] = verbose
        else:
            warnings.append(f"Invalid verbose '{verbose}', using false")

        timeout = data.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, int) and not isinstance(timeout, bool) and timeout > 0:
            kwargs["timeout"] = timeout
        else:
            warnings.append(f"Invalid timeout '{timeout}', using {DEFAULT_TIMEOUT}")

        for name in VALID_PROVIDERS:
            section = data.get(name, {})
            if not isinstance(section, dict):
                warnings.append(f"Section '{name}' must be an object, ignoring it")
                section = {}
            kwargs[name] = _merge_settings(DEFAULT_SETTINGS[name], section, name, warnings)

        for message in warnings:
            print(f"Config warning: {message}", file=sys.stderr)
        return cls(**kwargs)


def _merge_settings(base: ProviderSettings, section: dict, name: str, warnings: list[str]) -> ProviderSettings:
    updates = {}
    for key in ("model", "url", "api_key"):
        value = section.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or not value.strip():
            warnings.append(f"Invalid {name}.{key}, using default")
            continue
        updates[key] = value.strip()
    if "url" in updates:
        updates["url"] = updates["url"].rstrip("/")
    return replace(base, **updates)


def load_config_file(path: Path) -> dict:
    """Read a config file. Anything but a readable JSON object is an error."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def example_config() -> dict:
    """Annotated-by-example config showing every supported key."""
    return {
        "default_provider": "ollama",
        "verbose": False,
        "timeout": DEFAULT_TIMEOUT,
        "gemini": {
            "model": DEFAULT_SETTINGS["gemini"].model,
            "api_key": "your-gemini-api-key",
        },
        "ollama": {
            "model": DEFAULT_SETTINGS["ollama"].model,
            "url": DEFAULT_SETTINGS["ollama"].url,
        },
        "openai": {
            "model": "gpt-4o-mini",
            "url": DEFAULT_SETTINGS["openai"].url,
            "api_key": "sk-your-key",
        },
    }


def save_config(config: Config, path: Path) -> Path:
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)
        f.write('\n')
    return path


class ConfigResolver:
    """Turns CLI flags plus the environment into a Config."""

    def __init__(self, env: Optional[Mapping[str, str]] = None,
                 cwd: Optional[Path] = None, home: Optional[Path] = None):
        self.env = os.environ if env is None else env
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.home = Path(home) if home else Path.home()

    @property
    def default_path(self) -> Path:
        """Where --setup writes when no --config is given."""
        return self.home / CONFIG_FILENAME

    def load(self, explicit_path: Optional[str] = None) -> Config:
        """Load the highest priority config source, without flag overrides."""
        if explicit_path:
            path = Path(explicit_path).expanduser()
            return Config.from_dict(load_config_file(path), source=path)

        env_path = self.env.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path).expanduser()
            return Config.from_dict(load_config_file(path), source=path)

        for path in (self.cwd / CONFIG_FILENAME, self.home / CONFIG_FILENAME):
            if not path.is_file():
                continue
            try:
                return Config.from_dict(load_config_file(path), source=path)
            except ConfigError as e:
                print(f"Config warning: {e}; skipping", file=sys.stderr)

        return Config()

    def resolve(self, args) -> Config:
        """Load the config source, then apply flags and env fallbacks."""
        config = self.load(getattr(args, "config", None))

        provider = self._pick_provider(args, config)
        overrides = {"provider": provider}
        if getattr(args, "verbose", False):
            overrides["verbose"] = True

        flag_values = {
            "gemini": {"api_key": getattr(args, "gemini_key", None)},
            "ollama": {"url": getattr(args, "ollama_url", None)},
            "openai": {
                "url": getattr(args, "openai", None),
                "api_key": getattr(args, "openai_key", None),
            },
        }
        model = getattr(args, "model", None)
        if model:
            flag_values[provider]["model"] = model

        for name in VALID_PROVIDERS:
            settings = getattr(config, name)
            updates = {k: v for k, v in flag_values[name].items() if v}
            if "url" in updates:
                updates["url"] = updates["url"].rstrip("/")
            env_var = API_KEY_ENV_VARS.get(name)
            if env_var and not updates.get("api_key") and not settings.api_key and self.env.get(env_var):
                updates["api_key"] = self.env[env_var]
            overrides[name] = replace(settings, **updates)

        return replace(config, **overrides)

    def _pick_provider(self, args, config: Config) -> str:
        """Flag > provider-specific flag > config file > GEMINI_API_KEY > ollama."""
        if getattr(args, "provider", None):
            return args.provider
        if getattr(args, "openai", None):
            return "openai"
        if getattr(args, "ollama_url", None):
            return "ollama"
        if getattr(args, "gemini_key", None):
            return "gemini"
        if config.source is not None:
            return config.provider
        if self.env.get(API_KEY_ENV_VARS["gemini"]):
            return "gemini"
        return DEFAULT_PROVIDER


def mask_secret(value: Optional[str]) -> str:
    """Show just enough of a key to recognise it."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


__all__ = [
    "Config",
    "ConfigError",
    "ConfigResolver",
    "ProviderSettings",
    "DEFAULT_SETTINGS",
    "DEFAULT_PROVIDER",
    "DEFAULT_TIMEOUT",
    "VALID_PROVIDERS",
    "CONFIG_FILENAME",
    "CONFIG_ENV_VAR",
    "load_config_file",
    "example_config",
    "save_config",
    "mask_secret",
]
