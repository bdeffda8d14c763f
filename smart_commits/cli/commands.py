"""CLI Commands"""

import os
import sys
import time

from smart_commits.config import Config, ENV_OVERRIDES, load_config, save_config, get_config_path
from smart_commits.llm import LLMError, OllamaClient
from smart_commits.output import bold, dim, info, print_success, print_error
from smart_commits.cli.utils import ask, choose, confirm


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .smartcommitrc found)")

    overrides = [var for var in ENV_OVERRIDES if os.environ.get(var)]
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for var in overrides:
            print(f"    {var}={os.environ[var]}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:           {info(config.provider)}")
    print(f"    model:              {info(config.model or 'default')}")
    print(f"    vcs:                {info(config.vcs)}")
    print(f"    style:              {info(config.style)}")
    print(f"    include_body:       {info(str(config.include_body).lower())}")
    print(f"    max_subject_length: {info(str(config.max_subject_length))}")
    print(f"    auto_accept:        {info(str(config.auto_accept).lower())}")
    print(f"    strict:             {info(str(config.strict).lower())}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .smartcommitrc (in current directory)")
    print(f"    Global: ~/.smartcommitrc")
    print(f"\n  {dim('Run')} smart-commit --setup {dim('to configure')}\n")

    return 0


def run_setup() -> int:
    """Quick setup wizard."""
    display_config()
    print(f"{bold('Setup Wizard')}\n")

    providers = [
        ("auto", "Auto-detect (local first, then hosted APIs)"),
        ("local", "Ollama (free, local)"),
        ("anthropic", "Anthropic Claude API (ANTHROPIC_API_KEY)"),
        ("openai", "OpenAI API (OPENAI_API_KEY)"),
        ("openrouter", "OpenRouter API (OPENROUTER_API_KEY)"),
    ]
    provider = providers[choose("Choose AI provider:", [label for _, label in providers])][0]

    model = None
    if provider == 'local':
        print(f"\nRecommended: llama3.2:3b, gemma3:4b, mistral:7b\n")
    if provider != 'auto':
        model = ask("Model (Enter for default)") or None

    forges = ["github", "gitlab", "bitbucket"]
    vcs = forges[choose("\nForge for new remotes:", ["GitHub", "GitLab", "Bitbucket"])]

    styles = ["conventional", "detailed"]
    style = styles[choose("\nCommit message style:", [
        "conventional - type(scope): subject with bullets",
        "detailed - type(scope): subject with more bullets",
    ])]

    include_body = confirm("\nInclude bullet points in commit body?", True)
    auto_accept = confirm("Accept generated messages without asking?", False)

    max_len_input = ask("Max subject line length", "72")
    max_subject_length = int(max_len_input) if max_len_input.isdigit() else 72

    config = Config(
        provider=provider,
        model=model,
        vcs=vcs,
        style=style,
        include_body=include_body,
        max_subject_length=max_subject_length,
        auto_accept=auto_accept,
    )
    path = save_config(config, global_config=True)

    print_success(f"Saved to {path}")
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    line = 'eval "$(register-python-argcomplete smart-commit)"'

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell smart-commit | Out-String | Invoke-Expression\n")
        print("To make it permanent, add it to your $PROFILE.")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish smart-commit | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0


def run_warmup(provider: str | None, model: str | None) -> int:
    """Pre-load the Ollama model into memory."""
    if provider and provider not in ('auto', 'local'):
        print_error("--warmup only works with the local provider (Ollama)")
        return 1

    try:
        client = OllamaClient(model=model)
    except LLMError as e:
        print_error(f"Failed to connect to Ollama: {e}")
        return 1

    if client.is_model_loaded():
        print_success(f"Model {bold(client.model)} is already loaded")
        return 0

    print(f"Loading {bold(client.model)}... ", end='', flush=True)
    start = time.time()
    loaded = client.warmup()
    elapsed = time.time() - start

    if loaded:
        print_success(f"ready! ({elapsed:.1f}s)")
        print(dim("Model will stay loaded for ~10 minutes"))
        return 0
    print_error("failed to load model")
    return 1
