"""Shell completion scripts for the ``2ndbrain`` command."""

from __future__ import annotations

from typing import Final

SUPPORTED_SHELLS: Final[tuple[str, ...]] = ("bash", "zsh", "fish")

_COMPLETION_BASH: Final[str] = """\
# 2ndbrain bash completion
#
# Installation:
#
#   ## Load completion into current shell
#   source <(2ndbrain completion bash)
#
#   ## Or write to file and source from .bash_profile (recommended for macOS)
#   2ndbrain completion bash > ~/.2ndbrain-completion.bash
#   echo 'source ~/.2ndbrain-completion.bash' >> ~/.bash_profile
#   source ~/.bash_profile
#
# Note: On macOS with bash 3.x, "source <(...)" may not work.
# Use the file-based method instead, or install bash 4+ via Homebrew.

_2ndbrain_completions() {
  local cur="${COMP_WORDS[COMP_CWORD]}"
  local prev="${COMP_WORDS[COMP_CWORD-1]}"
  local cmd="${COMP_WORDS[1]}"

  # Top-level commands
  local commands="init update remove member completion config"
  local common="--config --no-color --verbose --json --log-level --log-file -h --help"

  case "$prev" in
    -t|--template|--config|--log-file)
      COMPREPLY=( $(compgen -f -- "$cur") )
      return 0
      ;;
    --log-level)
      COMPREPLY=( $(compgen -W "DEBUG INFO WARNING ERROR" -- "$cur") )
      return 0
      ;;
  esac

  case "$cmd" in
    init)
      COMPREPLY=( $(compgen -W "-t --template -f --force --reset-config $common" -- "$cur") )
      [[ -z "$cur" || "$cur" != -* ]] && COMPREPLY+=( $(compgen -d -- "$cur") )
      ;;
    update)
      COMPREPLY=( $(compgen -W "-t --template -d --dry-run -y --yes $common" -- "$cur") )
      [[ -z "$cur" || "$cur" != -* ]] && COMPREPLY+=( $(compgen -d -- "$cur") )
      ;;
    remove)
      COMPREPLY=( $(compgen -W "-d --dry-run -f --force $common" -- "$cur") )
      [[ -z "$cur" || "$cur" != -* ]] && COMPREPLY+=( $(compgen -d -- "$cur") )
      ;;
    member)
      COMPREPLY=( $(compgen -W "-f --force --no-config $common" -- "$cur") )
      ;;
    completion)
      COMPREPLY=( $(compgen -W "bash zsh fish" -- "$cur") )
      ;;
    config)
      COMPREPLY=( $(compgen -W "$common" -- "$cur") )
      ;;
    *)
      COMPREPLY=( $(compgen -W "$commands -V --version -h --help" -- "$cur") )
      ;;
  esac
}

complete -F _2ndbrain_completions 2ndbrain
"""

_COMPLETION_ZSH: Final[str] = """\
#compdef 2ndbrain

# 2ndbrain zsh completion

_2ndbrain() {
  local -a commands common
  commands=(
    'init:Initialize a new 2ndBrain project'
    'update:Update framework files from template'
    'remove:Remove framework files (preserves user data)'
    'member:Initialize a new member directory'
    'completion:Generate shell completion script'
    'config:Show effective configuration'
  )
  common=(
    '--config[Path to 2ndbrain.toml]:file:_files'
    '--no-color[Disable colored output]'
    '--verbose[Show diagnostic events]'
    '--json[Emit JSON output]'
    '--log-level[Diagnostic log level]:level:(DEBUG INFO WARNING ERROR)'
    '--log-file[Write diagnostic events as JSON lines]:file:_files'
    '(-h --help)'{-h,--help}'[Show help]'
  )

  _arguments -C \\
    '(-V --version)'{-V,--version}'[Show version]' \\
    '(-h --help)'{-h,--help}'[Show help]' \\
    '1: :->command' \\
    '*:: :->args'

  case $state in
    command)
      _describe -t commands 'commands' commands
      ;;
    args)
      case $words[1] in
        init)
          _arguments \\
            '(-t --template)'{-t,--template}'[Use custom template directory]:directory:_directories' \\
            '(-f --force)'{-f,--force}'[Force overwrite existing project]' \\
            '--reset-config[Replace .obsidian with the template copy]' \\
            $common \\
            '1:path:_directories'
          ;;
        update)
          _arguments \\
            '(-t --template)'{-t,--template}'[Use custom template directory]:directory:_directories' \\
            '(-d --dry-run)'{-d,--dry-run}'[Show what would be updated]' \\
            '(-y --yes)'{-y,--yes}'[Apply all changes without prompting]' \\
            $common \\
            '1:path:_directories'
          ;;
        remove)
          _arguments \\
            '(-d --dry-run)'{-d,--dry-run}'[Show what would be removed]' \\
            '(-f --force)'{-f,--force}'[Force removal without confirmation]' \\
            $common \\
            '1:path:_directories'
          ;;
        member)
          _arguments \\
            '(-f --force)'{-f,--force}'[Force overwrite existing member]' \\
            '--no-config[Skip Obsidian config update]' \\
            $common \\
            '1:name:' \\
            '2:path:_directories'
          ;;
        completion)
          _arguments \\
            '1:shell:(bash zsh fish)'
          ;;
        config)
          _arguments $common
          ;;
      esac
      ;;
  esac
}

_2ndbrain
"""

_COMPLETION_FISH: Final[str] = """\
# 2ndbrain fish completion

# Disable file completion by default
complete -c 2ndbrain -f

# Top-level commands
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'init' -d 'Initialize a new 2ndBrain project'
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'update' -d 'Update framework files from template'
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'remove' -d 'Remove framework files'
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'member' -d 'Initialize a new member directory'
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'completion' -d 'Generate shell completion script'
complete -c 2ndbrain -n '__fish_use_subcommand' -a 'config' -d 'Show effective configuration'

# Global options
complete -c 2ndbrain -n '__fish_use_subcommand' -s V -l version -d 'Show version'
complete -c 2ndbrain -n '__fish_use_subcommand' -s h -l help -d 'Show help'

# Options shared by every subcommand
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l config -d 'Path to 2ndbrain.toml' -r -F
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l no-color -d 'Disable colored output'
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l verbose -d 'Show diagnostic events'
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l json -d 'Emit JSON output'
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l log-level -d 'Diagnostic log level' -r -a 'DEBUG INFO WARNING ERROR'
complete -c 2ndbrain -n 'not __fish_use_subcommand' -l log-file -d 'Write diagnostic events as JSON lines' -r -F

# init options
complete -c 2ndbrain -n '__fish_seen_subcommand_from init' -s t -l template -d 'Use custom template directory' -r -a '(__fish_complete_directories)'
complete -c 2ndbrain -n '__fish_seen_subcommand_from init' -s f -l force -d 'Force overwrite existing project'
complete -c 2ndbrain -n '__fish_seen_subcommand_from init' -l reset-config -d 'Replace .obsidian with the template copy'
complete -c 2ndbrain -n '__fish_seen_subcommand_from init' -s h -l help -d 'Show help'
complete -c 2ndbrain -n '__fish_seen_subcommand_from init' -a '(__fish_complete_directories)'

# update options
complete -c 2ndbrain -n '__fish_seen_subcommand_from update' -s t -l template -d 'Use custom template directory' -r -a '(__fish_complete_directories)'
complete -c 2ndbrain -n '__fish_seen_subcommand_from update' -s d -l dry-run -d 'Show what would be updated'
complete -c 2ndbrain -n '__fish_seen_subcommand_from update' -s y -l yes -d 'Apply all changes without prompting'
complete -c 2ndbrain -n '__fish_seen_subcommand_from update' -s h -l help -d 'Show help'
complete -c 2ndbrain -n '__fish_seen_subcommand_from update' -a '(__fish_complete_directories)'

# remove options
complete -c 2ndbrain -n '__fish_seen_subcommand_from remove' -s d -l dry-run -d 'Show what would be removed'
complete -c 2ndbrain -n '__fish_seen_subcommand_from remove' -s f -l force -d 'Force removal without confirmation'
complete -c 2ndbrain -n '__fish_seen_subcommand_from remove' -s h -l help -d 'Show help'
complete -c 2ndbrain -n '__fish_seen_subcommand_from remove' -a '(__fish_complete_directories)'

# member options
complete -c 2ndbrain -n '__fish_seen_subcommand_from member' -s f -l force -d 'Force overwrite existing member'
complete -c 2ndbrain -n '__fish_seen_subcommand_from member' -l no-config -d 'Skip Obsidian config update'
complete -c 2ndbrain -n '__fish_seen_subcommand_from member' -s h -l help -d 'Show help'

# completion options
complete -c 2ndbrain -n '__fish_seen_subcommand_from completion' -a 'bash zsh fish'
"""

_COMPLETION_SCRIPTS: Final[dict[str, str]] = {
    "bash": _COMPLETION_BASH,
    "zsh": _COMPLETION_ZSH,
    "fish": _COMPLETION_FISH,
}


def completion(shell: str) -> str | None:
    """Completion script text for ``shell``, or ``None`` when unsupported."""

    return _COMPLETION_SCRIPTS.get(shell)


__all__ = ["SUPPORTED_SHELLS", "completion"]
