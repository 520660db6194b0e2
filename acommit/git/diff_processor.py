"""Diff Processor - Trim raw diffs down to something a model can read."""

import re
from dataclasses import dataclass, field

from acommit.git.inspector import DiffPayload


@dataclass
class ProcessedDiff:
    """Prompt-ready view of a DiffPayload."""
    summary: str
    detailed_diff: str
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False
    files: list[str] = field(default_factory=list)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    """Size limits for the diff body."""
    max_chars: int = 12000
    max_lines_per_file: int = 200


class DiffProcessor:
    """Drops noise files and caps the diff body size."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'Cargo\.lock$', r'Gemfile\.lock$', r'composer\.lock$',
        r'uv\.lock$', r'go\.sum$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'(^|/)dist/', r'(^|/)build/', r'\.egg-info/', r'node_modules/',
    ]

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._noise_re = [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]

    def is_noise(self, path: str) -> bool:
        return any(p.search(path) for p in self._noise_re)

    def process(self, payload: DiffPayload) -> ProcessedDiff:
        noise = [p for p in payload.files if self.is_noise(p)]
        summary = self._build_summary(payload, noise)

        file_diffs = self._split_diff_by_file(payload.diff)
        parts = []
        used = 0
        included = 0
        truncated = False
        for path, body in file_diffs.items():
            if self.is_noise(path):
                continue
            body = self._truncate_file_diff(body, path)
            if used + len(body) > self.config.max_chars:
                truncated = True
                continue
            parts.append(body)
            used += len(body) + 1
            included += 1

        return ProcessedDiff(
            summary=summary,
            detailed_diff="\n".join(parts),
            total_files=len(payload.files),
            included_files=included,
            filtered_files=len(noise),
            truncated=truncated,
            files=list(payload.files),
        )

    def _build_summary(self, payload: DiffPayload, noise: list[str]) -> str:
        side = "staged" if payload.staged else "unstaged"
        lines = [f"FILES CHANGED ({side}):"]
        untracked = set(payload.untracked)
        for path in payload.files:
            note = " (new, untracked)" if path in untracked else ""
            lines.append(f"  {path}{note}")
        if noise:
            lines.append(f"[Diff omitted for {len(noise)} generated/lock files]")
        return "\n".join(lines)

    def _split_diff_by_file(self, diff: str) -> dict[str, str]:
        files = {}
        current_file = None
        current_lines = []

        for line in diff.split('\n'):
            if line.startswith('diff --git'):
                if current_file:
                    files[current_file] = '\n'.join(current_lines).rstrip('\n')
                match = re.search(r'diff --git a/(.+?) b/', line)
                current_file = match.group(1) if match else None
                current_lines = [line]
            elif current_file:
                current_lines.append(line)

        if current_file:
            files[current_file] = '\n'.join(current_lines).rstrip('\n')

        return files

    def _truncate_file_diff(self, diff: str, path: str) -> str:
        lines = diff.split('\n')
        limit = self.config.max_lines_per_file
        if len(lines) <= limit:
            return diff
        kept = lines[:limit]
        kept.append(f"... [{len(lines) - limit} more lines truncated from {path}]")
        return '\n'.join(kept)
