"""CLI Commands"""

import json
from dataclasses import replace
from pathlib import Path

from acommit.config import (
    Config, ConfigResolver, DEFAULT_SETTINGS, VALID_PROVIDERS, CONFIG_ENV_VAR,
    example_config, mask_secret, save_config,
)
from acommit.output import bold, dim, info, print_success, print_error


def print_example_config() -> int:
    """Print an example config file to stdout."""
    print(json.dumps(example_config(), indent=2))
    return 0


def display_config(config: Config) -> None:
    """Show the resolved configuration with keys masked."""
    source = str(config.source) if config.source else "built-in defaults"
    print(f"{bold('Configuration')} {dim(f'(from {source})')}")
    print(f"  provider: {info(config.provider)}")
    print(f"  verbose:  {str(config.verbose).lower()}")
    print(f"  timeout:  {config.timeout}s")
    for name in VALID_PROVIDERS:
        settings = getattr(config, name)
        marker = info('*') if name == config.provider else ' '
        details = [f"model={settings.model}"]
        if settings.url:
            details.append(f"url={settings.url}")
        if name != "ollama":
            details.append(f"api_key={mask_secret(settings.api_key)}")
        print(f" {marker}{name:<7} {dim(', '.join(details))}")


def _ask(prompt: str, default: str | None = None) -> str:
    suffix = f" [{default}]" if default else ""
    answer = input(f"{prompt}{suffix}: ").strip()
    return answer or (default or "")


def run_setup(resolver: ConfigResolver, path: str | None = None) -> int:
    """Quick setup wizard. Starts from the current config and saves over it."""
    target = Path(path).expanduser() if path else resolver.default_path
    config = Config()
    if target.is_file():
        config = resolver.load(str(target))

    try:
        config = _ask_settings(config)
    except (KeyboardInterrupt, EOFError):
        print()
        print(dim("Setup cancelled, nothing saved"))
        return 1
    saved = save_config(config, target)

    print()
    print_success(f"Saved to {saved}")
    if saved != resolver.default_path:
        print(dim(f"  Pass --config {saved} or set {CONFIG_ENV_VAR} to use it from anywhere."))
    return 0


def _ask_settings(config: Config) -> Config:
    print(f"\n{bold('acommit setup')}\n")
    print("Choose provider:\n")
    print("  1. Ollama (free, local)")
    print("  2. Gemini (Google API key)")
    print("  3. OpenAI-compatible (OpenAI, LM Studio, llama.cpp server, ...)\n")

    choices = {"1": "ollama", "2": "gemini", "3": "openai"}
    current = next(k for k, v in choices.items() if v == config.provider)
    while True:
        choice = _ask("Select [1/2/3]", current)
        if choice in choices:
            provider = choices[choice]
            break
        print_error("Enter 1, 2 or 3")

    settings = getattr(config, provider)
    model = _ask("Model", settings.model)
    updates = {"model": model}

    if provider in ("ollama", "openai"):
        updates["url"] = _ask("Base URL", settings.url or DEFAULT_SETTINGS[provider].url).rstrip('/')
    if provider in ("gemini", "openai"):
        hint = "Enter to keep current" if settings.api_key else "Enter to use the environment variable"
        key = input(f"API key ({hint}): ").strip()
        if key:
            updates["api_key"] = key

    return replace(config, provider=provider, **{provider: replace(settings, **updates)})
