"""CLI Main Entry Point"""

import sys

from acommit.config import Config, ConfigError, ConfigResolver
from acommit.git import GitError, GitInspector, DiffProcessor
from acommit.llm import LLMClient, LLMError, get_client, is_conventional
from acommit.output import (
    RULE, Spinner, bold, dim, info, success, warning,
    colorize_commit_type, print_debug, print_error, print_success, print_warning,
)
from acommit.prompts import PromptBuilder

from acommit.cli.args import parse_args
from acommit.cli.commands import display_config, print_example_config, run_setup
from acommit.cli.utils import deferred_interrupt, edit_message

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

MAX_STATUS_LINES = 10


def _display_status(status, verbose: bool):
    """Show the porcelain entries that will go into the commit."""
    print(bold("Found changes:"))
    limit = len(status.entries) if verbose else MAX_STATUS_LINES
    for entry in status.entries[:limit]:
        print(dim(f"  {entry}"))
    remaining = len(status.entries) - limit
    if remaining > 0:
        print(dim(f"  ... and {remaining} more"))


def _display_message(message: str):
    """Display commit message between rules, type prefix colored."""
    colored = colorize_commit_type(message)
    lines = colored.split('\n')
    width = max((len(line) for line in message.split('\n')), default=40)
    print(f"\n{dim(RULE * width)}")
    print(bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(dim(RULE * width))
    if not is_conventional(message):
        print_warning("Message doesn't follow the conventional commit format")


def _ask_for_edit(message: str, prompt_input) -> str:
    """Free-text replacement; an empty reply opens $EDITOR instead."""
    replacement = prompt_input(dim("New message (Enter to open your editor): ")).strip()
    if replacement:
        return replacement
    edited = edit_message(message)
    if edited is None:
        print_warning("Editor returned nothing, keeping the generated message")
        return message
    return edited


def _confirm(message: str, prompt_input) -> str | None:
    """Ask until the user accepts, rejects or edits. Returns the final message or None."""
    while True:
        _display_message(message)
        try:
            answer = prompt_input(
                f"\nUse this commit message? {dim('[y]es / [n]o / [e]dit (default: no)')}: "
            ).strip().lower()
            if answer in ('y', 'yes'):
                return message
            if answer in ('', 'n', 'no'):
                return None
            if answer in ('e', 'edit'):
                message = _ask_for_edit(message, prompt_input)
                continue
        except (KeyboardInterrupt, EOFError):
            print()
            return None
        print(warning("Answer y, n or e"))


def run_commit_flow(config: Config, inspector=None, client: LLMClient | None = None,
                    prompt_input=input) -> int:
    """Inspect, generate, confirm, commit.

    ``inspector`` and ``client`` default to the real git CLI and the
    configured provider; tests pass fakes.
    """
    trace = print_debug if config.verbose else None
    if config.verbose:
        display_config(config)

    try:
        inspector = inspector or GitInspector()
        status = inspector.status()
        if status.is_clean:
            print_success("No changes to commit")
            return EXIT_OK

        # Credentials are checked here, before the diff is read or sent anywhere
        client = client or get_client(config, trace=trace)
        print(f"Using {info(client.name)}")
        _display_status(status, config.verbose)

        payload = inspector.diff()
        if payload.is_empty:
            print_success("No changes to commit")
            return EXIT_OK

        processed = DiffProcessor().process(payload)
        prompt = PromptBuilder().build(processed)
        if config.verbose:
            print_debug(f"Prompt: ~{processed.estimated_tokens} tokens ({len(prompt)} chars), "
                        f"{processed.included_files}/{processed.total_files} file diffs included")

        with Spinner("Generating commit message..."):
            response = client.generate(prompt)
        if config.verbose and response.tokens_used:
            print_debug(f"Response: {response.tokens_used} tokens")

        message = _confirm(response.content, prompt_input)
        if message is None:
            print(dim("Commit cancelled"))
            return EXIT_OK

        print("Committing all changes...")
        with deferred_interrupt() as interrupts:
            try:
                output = inspector.commit(message)
            except GitError as e:
                if not interrupts:
                    raise
                print_error(f"Interrupted, no commit made\n{e}")
                return EXIT_INTERRUPTED
        if interrupts:
            print_warning("Interrupted after the commit was made; keeping it")
        if config.verbose and output.strip():
            print_debug(output.strip())
        print_success(f"Committed: {success(message.splitlines()[0])}")
        return EXIT_OK

    except (GitError, LLMError) as e:
        print_error(str(e))
        return EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)

    if args.example_config:
        return print_example_config()

    resolver = ConfigResolver()
    try:
        if args.setup:
            return run_setup(resolver, args.config)
        config = resolver.resolve(args)
    except ConfigError as e:
        print_error(str(e))
        return EXIT_ERROR

    return run_commit_flow(config)


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print(file=sys.stderr)
        print_error("Interrupted")
        sys.exit(EXIT_INTERRUPTED)
