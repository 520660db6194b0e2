"""Prompt Construction Package"""

from acommit.prompts.builder import PromptBuilder, SYSTEM_INSTRUCTION, MAX_SUBJECT_LENGTH

__all__ = ["PromptBuilder", "SYSTEM_INSTRUCTION", "MAX_SUBJECT_LENGTH"]
