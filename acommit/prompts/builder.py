"""Prompt Builder - the fixed instruction and the per-run prompt."""

from acommit import COMMIT_TYPES
from acommit.git.diff_processor import ProcessedDiff

MAX_SUBJECT_LENGTH = 72

SYSTEM_INSTRUCTION = f"""You write git commit messages.

Reply with exactly ONE commit message in conventional commit format:

type(scope): description

Rules:
- type is one of: {', '.join(COMMIT_TYPES)}
- scope is optional, one word (module or component name)
- description is lowercase, imperative mood ("add", not "added"), no trailing period
- at most {MAX_SUBJECT_LENGTH} characters in total
- describe the primary purpose of the change, not every file
- return only the commit message: no quotes, no markdown, no explanation"""


class PromptBuilder:
    """Renders a ProcessedDiff into the user prompt."""

    def build(self, diff: ProcessedDiff) -> str:
        sections = [
            "Generate a concise, clear git commit message in English for these changes.",
            diff.summary,
            self._build_diff_section(diff),
            self._build_types_section(),
            "Only return the commit message, nothing else.",
        ]
        return "\n\n".join(filter(None, sections))

    def _build_diff_section(self, diff: ProcessedDiff) -> str:
        note = ""
        if diff.truncated:
            shown = f"{diff.included_files} of {diff.total_files}"
            note = f"[Diff truncated due to size: showing {shown} files]"
        if not diff.detailed_diff:
            return note
        return f"<diff>\n{diff.detailed_diff}\n</diff>" + (f"\n{note}" if note else "")

    def _build_types_section(self) -> str:
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"Choose the most appropriate type:\n{types_list}"
