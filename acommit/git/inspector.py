"""Git Inspector - status, diff and commit through the git CLI."""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class NotAGitRepository(GitError):
    """Raised when the working directory is outside a git work tree."""
    pass


class GitCommandError(GitError):
    """A git command exited nonzero. Carries git's own output verbatim."""

    def __init__(self, args: tuple[str, ...], returncode: int, output: str):
        self.args_used = args
        self.returncode = returncode
        self.output = output
        detail = f"\n{output}" if output else ""
        super().__init__(f"git {' '.join(args)} failed (exit {returncode}){detail}")


@dataclass
class RepoStatus:
    """Which sides of the index have changes."""
    has_staged_changes: bool = False
    has_unstaged_changes: bool = False
    entries: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.has_staged_changes or self.has_unstaged_changes)

    @classmethod
    def from_porcelain(cls, output: str) -> 'RepoStatus':
        """Parse ``git status --porcelain`` (v1) output.

        Column X is the index, column Y the work tree; ``??`` marks an
        untracked path, which counts as an unstaged change.
        """
        status = cls()
        for line in output.splitlines():
            if len(line) < 3:
                continue
            status.entries.append(line)
            x, y = line[0], line[1]
            if x == '?' and y == '?':
                status.has_unstaged_changes = True
                continue
            if x not in (' ', '!'):
                status.has_staged_changes = True
            if y not in (' ', '!'):
                status.has_unstaged_changes = True
        return status


@dataclass
class DiffPayload:
    """Changes that will be described to the provider."""
    files: list[str] = field(default_factory=list)
    diff: str = ""
    staged: bool = True
    untracked: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.diff.strip()


class GitInspector:
    """Narrow interface over the git executable."""

    def __init__(self, cwd: Optional[Path] = None):
        self.cwd = Path(cwd) if cwd else None
        self._verify_git_available()
        self._verify_in_repo()

    def _run(self, *args: str, detached: bool = False) -> subprocess.CompletedProcess:
        kwargs = {}
        if detached and os.name == 'posix':
            # Own session: a terminal Ctrl-C reaches us, not git or its hooks
            kwargs['start_new_session'] = True
        try:
            return subprocess.run(
                ['git', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                **kwargs,
            )
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _run_git(self, *args: str, detached: bool = False) -> str:
        """Run a git command and return stdout, raising on nonzero exit."""
        result = self._run(*args, detached=detached)
        if result.returncode != 0:
            output = (result.stderr.strip() or result.stdout.strip())
            raise GitCommandError(args, result.returncode, output)
        return result.stdout

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        self._run('--version')

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git work tree."""
        result = self._run('rev-parse', '--is-inside-work-tree')
        if result.returncode != 0 or result.stdout.strip() != 'true':
            where = self.cwd or Path.cwd()
            raise NotAGitRepository(f"Not inside a git repository: {where}")

    def status(self) -> RepoStatus:
        return RepoStatus.from_porcelain(self._run_git('status', '--porcelain'))

    def diff(self) -> DiffPayload:
        """Staged diff when anything is staged, otherwise the work tree diff.

        The work tree fallback also lists untracked files, since ``git add -A``
        will include them in the commit.
        """
        staged_files = self._lines(self._run_git('diff', '--cached', '--name-only'))
        if staged_files:
            return DiffPayload(
                files=staged_files,
                diff=self._run_git('diff', '--cached', '--no-color', '--no-ext-diff'),
                staged=True,
            )

        files = self._lines(self._run_git('diff', '--name-only'))
        untracked = self._lines(self._run_git('ls-files', '--others', '--exclude-standard'))
        return DiffPayload(
            files=files + [p for p in untracked if p not in files],
            diff=self._run_git('diff', '--no-color', '--no-ext-diff'),
            staged=False,
            untracked=untracked,
        )

    def commit(self, message: str) -> str:
        """Stage everything and commit it with ``message``.

        Both commands run detached from the terminal so Ctrl-C can't kill
        them halfway. If the commit fails (a rejecting hook, say) the changes
        stay staged. If git itself is killed by a signal, the index is put
        back the way it was before ``git add``.
        """
        index = self._index_path()
        saved = index.read_bytes() if index.is_file() else None
        try:
            self._run_git('add', '-A', detached=True)
            return self._run_git('commit', '-m', message, detached=True)
        except GitCommandError as e:
            if e.returncode < 0:
                self._restore_index(index, saved)
            raise

    def _index_path(self) -> Path:
        relative = self._run_git('rev-parse', '--git-path', 'index').strip()
        return (self.cwd or Path.cwd()) / relative

    @staticmethod
    def _restore_index(index: Path, saved: Optional[bytes]) -> None:
        if saved is None:
            index.unlink(missing_ok=True)
        else:
            index.write_bytes(saved)

    @staticmethod
    def _lines(output: str) -> list[str]:
        return [line for line in output.splitlines() if line.strip()]
