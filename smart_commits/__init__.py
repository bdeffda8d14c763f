"""
Smart Commits

AI-drafted Conventional Commits from uncommitted git changes, committed
hunk by hunk.
"""

__version__ = "1.0.0"

# Centralized commit types - single source of truth
# Used by: commit.py (CommitType), prompts/builder.py, cli/args.py (argparse)
COMMIT_TYPES = {
    'feat': 'A new feature or capability',
    'fix': 'A bug fix',
    'docs': 'Documentation only changes',
    'style': 'Formatting, whitespace, no code change',
    'refactor': 'Code restructuring without behavior change',
    'test': 'Adding or updating tests',
    'chore': 'Maintenance tasks, dependencies, tooling',
    'perf': 'Performance improvement',
    'build': 'Build system or external dependency changes',
    'ci': 'CI/CD configuration changes',
    'revert': 'Reverts a previous commit',
}

# List of type names for validation and argparse
COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())

# Breaking changes are marked with "!" after the type/scope: feat(api)!: drop v1
