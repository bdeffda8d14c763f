"""Prompt Construction Package"""

from smart_commits.prompts.builder import PromptBuilder, PromptConfig

__all__ = ["PromptBuilder", "PromptConfig"]
