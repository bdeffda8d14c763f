"""Commit Message Generator - Prompt the AI service and normalize its answers."""

import logging
from dataclasses import replace
from pathlib import PurePosixPath

from smart_commits.commit import CommitMessage, CommitType, InvalidCommitMessageError, clean_commit_message
from smart_commits.git import DiffHunk, DiffProcessor, extract_added_lines
from smart_commits.llm import AIProvider, AIService, LLMError
from smart_commits.prompts import PromptBuilder, PromptConfig

logger = logging.getLogger(__name__)


class CommitMessageGenerator:
    """Turns hunks (or file lists) into validated CommitMessage values."""

    def __init__(self, ai_service: AIService, provider: AIProvider | None = None,
                 model: str | None = None, prompt_config: PromptConfig | None = None,
                 processor: DiffProcessor | None = None):
        self.ai_service = ai_service
        self.provider = provider
        self.model = model
        self.prompt_config = prompt_config or PromptConfig()
        self.processor = processor or DiffProcessor()
        self.builder = PromptBuilder()

    def _ask(self, prompt: str) -> str:
        response = self.ai_service.generate(prompt, provider=self.provider, model=self.model)
        logger.debug("Model answered with %d chars (%d tokens)", len(response.content), response.tokens_used)
        return response.content

    def _config_for(self, file_count: int) -> PromptConfig:
        return replace(self.prompt_config, file_count=file_count)

    def generate_for_hunk(self, hunk: DiffHunk) -> CommitMessage:
        processed = self.processor.process([hunk])
        prompt = self.builder.build(processed, self._config_for(1), added_lines=extract_added_lines(hunk))
        return self.validate_and_format(self._ask(prompt), hunk)

    def generate_for_hunks(self, hunks: list[DiffHunk]) -> CommitMessage:
        processed = self.processor.process(hunks)
        prompt = self.builder.build(processed, self._config_for(processed.total_files))
        return self.validate_and_format(self._ask(prompt), hunks[0] if hunks else None)

    def generate_for_all_changes(self, hunks: list[DiffHunk], new_files: list[str] | None = None) -> CommitMessage:
        processed = self.processor.process(hunks, new_files)
        prompt = self.builder.build(processed, self._config_for(processed.total_files))
        return self.validate_and_format(self._ask(prompt))

    def generate_for_new_files(self, paths: list[str]) -> CommitMessage:
        """Message for a batch of untracked files; falls back to a chore summary."""
        fallback = CommitMessage(CommitType.CHORE, _new_files_description(paths))
        processed = self.processor.process([], paths)
        prompt = self.builder.build(processed, self._config_for(len(paths)))

        text = clean_commit_message(self._ask(prompt))
        try:
            return self._apply_preferences(CommitMessage.from_string(text))
        except InvalidCommitMessageError:
            logger.debug("Unparseable answer for new files, using fallback")
            return fallback

    def suggest_improvement(self, message: str) -> CommitMessage:
        """Ask for a better version of message; the parsed original is returned on failure."""
        try:
            text = clean_commit_message(self._ask(self.builder.build_improvement(message, self.prompt_config)))
            return CommitMessage.from_string(text)
        except (LLMError, InvalidCommitMessageError) as e:
            logger.warning("Could not improve commit message: %s", e)
            return CommitMessage.from_string(message)

    def validate_and_format(self, text: str, hunk: DiffHunk | None = None) -> CommitMessage:
        content = clean_commit_message(text or "").strip()

        if not content:
            target = PurePosixPath(hunk.file_path).name if hunk else "files"
            return CommitMessage(CommitType.CHORE, f"update {target}")

        max_len = self.prompt_config.max_subject_length
        lines = content.split('\n')
        if len(lines[0]) > max_len:
            lines[0] = lines[0][:max_len - 3] + '...'
            content = '\n'.join(lines)

        try:
            message = CommitMessage.from_string(content)
        except InvalidCommitMessageError:
            logger.debug("Model answer is not a conventional commit: %r", lines[0])
            return CommitMessage(CommitType.CHORE, lines[0].strip())

        return self._apply_preferences(message)

    def _apply_preferences(self, message: CommitMessage) -> CommitMessage:
        if self.prompt_config.forced_type:
            message = replace(message, type=CommitType.from_string(self.prompt_config.forced_type))
        if not self.prompt_config.include_body and self.prompt_config.style != "detailed":
            message = replace(message, body=None)
        return message


def _new_files_description(paths: list[str]) -> str:
    if not paths:
        return "add new files"
    first = PurePosixPath(paths[0]).name
    more = f" (+{len(paths) - 1} more)" if len(paths) > 1 else ""
    return f"add new files: {first}{more}"
