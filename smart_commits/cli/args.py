"""CLI Argument Parsing"""

import argparse
import argcomplete

from smart_commits import COMMIT_TYPE_NAMES, __version__
from smart_commits.config import VALID_PROVIDERS, VALID_STYLES, VALID_VCS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='smart-commit',
        description='Split your changes into AI-written conventional commits',
        epilog='Example: smart-commit --push (one commit per change set, then push)'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Commit workflow
    parser.add_argument('--push', action='store_true', help='Push after committing (sets upstream if missing)')
    parser.add_argument('-a', '--all', action='store_true', help='Commit all changes together with a single message')
    parser.add_argument('-d', '--dry-run', action='store_true', help='Show what would happen without committing')
    parser.add_argument('-y', '--auto', action='store_true', help='Accept generated messages without confirmation')
    parser.add_argument('--no-ai', action='store_true', help='Skip AI and type a single message for everything')
    parser.add_argument('--strict', action='store_true', help='Abort when git produces a diff fragment that cannot be parsed')

    # Generation options
    parser.add_argument('--hint', type=str, metavar='TEXT', help='Add context: --hint "fixing the login bug"')
    parser.add_argument('-t', '--type', type=str, choices=COMMIT_TYPE_NAMES, help='Force commit type')

    # Style options
    parser.add_argument('-s', '--style', type=str, choices=sorted(VALID_STYLES), help='Commit message style')
    parser.add_argument('--no-body', action='store_true', help='Generate subject line only, no bullet points')

    # Provider options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='AI provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    parser.add_argument('-g', '--vcs', type=str, choices=sorted(VALID_VCS), help='Forge used when creating a remote')
    parser.add_argument('--warmup', action='store_true', help='Pre-load the local Ollama model into memory')

    # Output options
    parser.add_argument('--verbose', action='store_true', help='Show debug logging (prompt size, tokens used)')

    # Setup/config
    parser.add_argument('--setup', action='store_true', help='Configure defaults')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
