"""CLI Argument Parsing"""

import argparse

import argcomplete

from acommit import __version__
from acommit.config import VALID_PROVIDERS

EPILOG = """\
examples:
  acommit                                             use GEMINI_API_KEY or local Ollama
  acommit --ollama-url http://server:11434 -m codellama:7b
  acommit --openai http://localhost:8080/v1 --model bitnet-model
  acommit --openai https://api.openai.com/v1 --openai-key sk-xxx --model gpt-4o-mini
  acommit --gemini-key xyz --model gemini-2.5-flash
  acommit --config ./team.acommit.json --verbose

environment:
  ACOMMIT_CONFIG    path to a config file (used when --config is not given)
  GEMINI_API_KEY    Gemini key when none is configured
  OPENAI_API_KEY    OpenAI-compatible key when none is configured
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='acommit',
        description='Generate a commit message for your changes with AI, then commit',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Config
    parser.add_argument('--setup', action='store_true', help='Interactive wizard that writes a config file')
    parser.add_argument('--config', type=str, metavar='PATH', help='Config file to use (overrides ACOMMIT_CONFIG and auto-detection)')
    parser.add_argument('--example-config', action='store_true', help='Print an example config file and exit')
    parser.add_argument('--verbose', action='store_true', help='Show resolved config and raw provider traffic')

    # Provider
    parser.add_argument('--provider', type=str, choices=VALID_PROVIDERS, help='Provider to use for this run')
    parser.add_argument('-gk', '--gemini-key', type=str, metavar='KEY', help='Gemini API key (selects Gemini)')
    parser.add_argument('-ou', '--ollama-url', type=str, metavar='URL', help='Ollama base URL (selects Ollama)')
    parser.add_argument('--openai', type=str, metavar='URL', help='OpenAI-compatible base URL, e.g. http://localhost:8080/v1 (selects OpenAI)')
    parser.add_argument('-ok', '--openai-key', type=str, metavar='KEY', help='API key for the OpenAI-compatible endpoint (optional)')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name for the active provider')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
