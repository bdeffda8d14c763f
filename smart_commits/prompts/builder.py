"""Prompt Builder - Construct LLM prompts for commit message generation."""

from dataclasses import dataclass, field

from smart_commits.git import ProcessedDiff
from smart_commits import COMMIT_TYPES

# Bullet count thresholds by file count: (min_files, bullet_range)
# Larger changes need more bullets to explain scope
BULLET_THRESHOLDS_DETAILED = [
    (15, "6-8"),  # 15+ files: large refactoring
    (8, "5-6"),   # 8-14 files: medium change
    (4, "4-5"),   # 4-7 files: small multi-file
    (0, "2-3"),   # 1-3 files: focused change
]

BULLET_THRESHOLDS_DEFAULT = [
    (15, "5-6"),
    (8, "4-5"),
    (4, "3-4"),
    (0, "1-2"),
]

# File count size descriptors
FILE_SIZE_THRESHOLDS = [
    (15, "large"),
    (4, ""),
    (0, "small"),
]

MAX_ADDED_LINES = 60

_SUBJECT_TYPED = "type(scope): [imperative verb + what changed]"

_BULLETS_CONVENTIONAL = """\
- [bullet: specific detail from the diff]
- [bullet: why or impact if relevant]"""

_BULLETS_DETAILED = """\
- [bullet: specific implementation detail]
- [bullet: why this approach was chosen]
- [bullet: what problem this solves]
- [bullet: any notable side effects]"""

# Lookup table: (style, include_body) -> body_template or None
EXAMPLE_BODIES: dict[tuple[str, bool], str | None] = {
    ("detailed", True): _BULLETS_DETAILED,
    ("detailed", False): _BULLETS_DETAILED,  # detailed always has body
    ("conventional", True): _BULLETS_CONVENTIONAL,
    ("conventional", False): None,
}


@dataclass
class PromptConfig:
    """User-provided context that shapes the prompt."""
    hint: str | None = None
    forced_type: str | None = None
    file_count: int = 0
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72
    recent_commits: list[str] = field(default_factory=list)


class PromptBuilder:
    """Constructs prompts optimized for commit message generation."""

    def build(self, diff: ProcessedDiff, config: PromptConfig | None = None, added_lines: str = "") -> str:
        config = config or PromptConfig()
        sections = [
            self._build_role_section(),
            self._build_format_section(config),
            self._build_examples_section(config),
            self._build_history_section(config),
            self._build_diff_section(diff, added_lines),
            self._build_hints_section(config),
            self._build_analysis_section(),
            self._build_final_instructions(config),
        ]
        return "\n\n".join(filter(None, sections))

    def build_improvement(self, message: str, config: PromptConfig | None = None) -> str:
        """Prompt asking the model to rewrite an existing commit message."""
        config = config or PromptConfig()
        return "\n\n".join(filter(None, [
            self._build_role_section(),
            self._build_format_section(config),
            f"""<original-message>
{message.strip()}
</original-message>""",
            f"""<instructions>
Improve the commit message above.

Rules:
- Keep the original intent; do not invent changes it does not mention
- Fix the type and scope if they do not fit the description
- Make the subject specific and imperative, max {config.max_subject_length} chars
- No markdown, no preamble, no explanation
- Output only the improved commit message
</instructions>""",
        ]))

    def _build_role_section(self) -> str:
        return """You are an expert at writing git commit messages. Your commit messages are documentation for future developers.

Core principles:
- The DIFF shows WHAT changed. Your job is to explain WHY.
- Write for the developer debugging this at 2am, six months from now.
- Every word must earn its place, no filler.

Your approach:
1. Identify the PRIMARY purpose (commits should do one thing well)
2. If the commit does multiple things, focus on the most significant change
3. Write a subject that completes: "If applied, this commit will..."
4. Add bullets only for non-obvious details, impact, or reasoning

Avoid:
- Vague verbs: "Update", "Change", "Modify" (be specific: "Add", "Remove", "Replace", "Extract")
- Restating the diff: don't say "Change X to Y" when the code shows that
- Filler bullets that repeat the subject line in different words

Scope selection (for type(scope): format):
- Include a scope in parentheses when one area is clearly affected, e.g. feat(auth):, fix(api):
- Use ONE lowercase word: module name (auth, api, cli), feature (login, checkout), or component
- NEVER use file paths like 'cli/utils.py' or 'src/config' - just use 'cli' or 'config'
- When changes span multiple areas, pick the primary one"""

    def _build_format_section(self, config: PromptConfig) -> str:
        max_len = config.max_subject_length
        format_desc = f"type(scope): subject line (lowercase, imperative mood, max {max_len} chars)"
        type_instruction = self._build_type_instruction(config.forced_type)

        body_section = self._build_body_section(config) if config.include_body else \
            "\nDo NOT include a body or bullet points. Subject line only."

        return f"""<format>
Write commit messages in this exact format:

{format_desc}
{body_section}

{type_instruction}
Mark breaking changes with ! after the type/scope, e.g. feat(api)!: ...
</format>"""

    def _build_type_instruction(self, forced_type: str | None) -> str:
        if forced_type:
            return f"\nIMPORTANT: Use type '{forced_type}' for this commit."
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"\nChoose the most appropriate type:\n{types_list}"

    def _build_body_section(self, config: PromptConfig) -> str:
        fc = config.file_count
        thresholds = BULLET_THRESHOLDS_DETAILED if config.style == "detailed" else BULLET_THRESHOLDS_DEFAULT
        bullets = self._get_bullet_range(fc, thresholds)

        prefix = "REQUIRED: Write exactly" if fc >= 8 else "Write"
        size = self._get_bullet_range(fc, FILE_SIZE_THRESHOLDS)
        suffix = f"for this {size} change" if size else "for this change"
        bullet_instruction = f"{prefix} {bullets} bullets {suffix} ({fc} files)."

        return f"""
- bullet points explaining the changes

{bullet_instruction}

Each bullet should:
- Be a complete thought (10-20 words)
- Explain WHAT changed and WHY
- Mention specific files, components, or functions by name"""

    def _get_bullet_range(self, file_count: int, thresholds: list[tuple[int, str]]) -> str:
        for threshold, range_str in thresholds:
            if file_count >= threshold:
                return range_str
        return thresholds[-1][1]

    def _build_examples_section(self, config: PromptConfig) -> str:
        warning = "CRITICAL: These show FORMAT only. Never use words from these examples. Analyze the ACTUAL diff below."

        bullets = EXAMPLE_BODIES.get((config.style, config.include_body), _BULLETS_CONVENTIONAL)
        example = _SUBJECT_TYPED
        if bullets:
            example += "\n\n" + bullets

        return f"""<format-examples>
{warning}

{example}
</format-examples>"""

    def _build_history_section(self, config: PromptConfig) -> str:
        if not config.recent_commits:
            return ""

        subjects = "\n".join(f"- {s}" for s in config.recent_commits)
        return f"""<recent-commits>
Recent subjects in this repository. Match their scope naming where it fits:
{subjects}
</recent-commits>"""

    def _build_diff_section(self, diff: ProcessedDiff, added_lines: str = "") -> str:
        parts = [
            "<changes>",
            f"FILES CHANGED: {diff.total_files}",
            "",
            diff.summary,
        ]

        if diff.detailed_diff:
            parts.extend(["", "DIFF DETAILS:", diff.detailed_diff])

        if added_lines:
            lines = added_lines.split('\n')
            if len(lines) > MAX_ADDED_LINES:
                lines = lines[:MAX_ADDED_LINES] + [f"... [{len(lines) - MAX_ADDED_LINES} more added lines]"]
            parts.extend(["", "ADDED CODE:", "\n".join(lines)])

        if diff.truncated:
            parts.append("\n[Note: Diff was truncated due to size. Focus on the file summary above for scope.]")

        parts.append("</changes>")
        return "\n".join(parts)

    def _build_hints_section(self, config: PromptConfig) -> str:
        if not config.hint:
            return ""

        return f"""<context>
The developer provided this context about the changes:
"{config.hint}"

Use this to inform your message, but verify it matches what you see in the diff.
</context>"""

    def _build_analysis_section(self) -> str:
        return """<thinking>
Before writing, analyze:
1. What is the PRIMARY change? Look for: new capability (feat), bug fix (fix), restructuring without behavior change (refactor), or other
2. Is there user-visible impact? If yes, lean toward feat/fix. If purely internal, consider refactor/chore
3. What scope is most affected? Pick the most specific area
4. What would a future developer need to understand about WHY this change was made?

Use this analysis internally, then output ONLY the commit message.
</thinking>"""

    def _build_final_instructions(self, config: PromptConfig) -> str:
        body_rule = "- Include bullet points in the body" if config.include_body else "- Do NOT include a body, subject line only"

        return f"""<instructions>
Generate exactly ONE commit message.

Rules:
- Start directly with the type(scope): subject line
- No markdown formatting (no ```, no bold)
- No preamble like "Here's a commit message:"
- No explanation after the message
{body_rule}
- Just the raw commit message, ready to use
</instructions>"""
