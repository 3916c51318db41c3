# Command-line configuration resolver

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .routing import normalize_extension
from .utils.errors import ConfigError, HelpRequested


USAGE = """\
Usage: tidyup [-d DIRECTORY] [-e EXT...] [-i EXT...] [-v] [-n] [-p]

  Group the files of a directory into category folders by extension.

Options:
  -h, --help                   Display this help message and exit.
  -d, --directory DIRECTORY    Directory to tidy (default: current directory).
  -e, --extensions EXT...      Only move files with these extensions.
  -i, --ignore EXT...          Never move files with these extensions.
  -v, --verbose                Print every file as it is processed.
  -n, --dry-run                Show what would be moved without touching anything.
  -p, --progress               Show a progress bar while scanning.
  -l, --list-rules             Print the extension routing table and exit.
      --log-file FILE          Also write a detailed log to FILE.
      --version                Print the version and exit.

  Extension lists are space separated and end at the next option,
  e.g. `tidyup -e png jpg -i jpeg -v`.

Examples:
  tidyup -d ~/Desktop
    Move images, Python and C++ sources on the desktop into
    'images', 'python' and 'c++' folders.

  tidyup --verbose
    Tidy the current directory, listing every file processed.
"""


@dataclass(frozen=True)
class TidyConfig:
    """Immutable run configuration produced by `resolve_config`"""
    directory: Path = Path(".")
    include_extensions: FrozenSet[str] = frozenset()
    exclude_extensions: FrozenSet[str] = frozenset()
    verbose: bool = False
    dry_run: bool = False
    show_progress: bool = False
    list_rules: bool = False
    show_version: bool = False
    log_file: Optional[Path] = None

    @classmethod
    def create(cls,
               directory=".",
               include: Iterable[str] = (),
               exclude: Iterable[str] = (),
               **kwargs) -> "TidyConfig":
        """Build a config, normalizing paths and extension lists"""
        log_file = kwargs.pop("log_file", None)
        return cls(
            directory=Path(directory),
            include_extensions=_normalize_all(include),
            exclude_extensions=_normalize_all(exclude),
            log_file=Path(log_file) if log_file else None,
            **kwargs
        )


def _normalize_all(extensions: Iterable[str]) -> FrozenSet[str]:
    normalized = (normalize_extension(ext) for ext in extensions)
    return frozenset(ext for ext in normalized if ext)


def _take_value(tokens: Sequence[str], index: int, flag: str) -> str:
    if index + 1 >= len(tokens):
        raise ConfigError(f"Missing value after {flag}")
    return tokens[index + 1]


def _take_list(tokens: Sequence[str], index: int) -> List[str]:
    values = []
    index += 1
    while index < len(tokens) and not tokens[index].startswith('-'):
        values.append(tokens[index])
        index += 1
    return values


def resolve_config(tokens: Sequence[str]) -> TidyConfig:
    """
    Turn raw command-line tokens into a TidyConfig

    Args:
        tokens: Arguments without the program name

    Returns:
        The resolved configuration

    Raises:
        ConfigError: Unknown flag or a flag missing its value
        HelpRequested: -h/--help was given
    """
    directory = "."
    include: List[str] = []
    exclude: List[str] = []
    log_file = None
    flags = {
        "verbose": False,
        "dry_run": False,
        "show_progress": False,
        "list_rules": False,
        "show_version": False,
    }
    switches = {
        "-v": "verbose", "--verbose": "verbose",
        "-n": "dry_run", "--dry-run": "dry_run",
        "-p": "show_progress", "--progress": "show_progress",
        "-l": "list_rules", "--list-rules": "list_rules",
        "--version": "show_version",
    }

    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in ("-d", "--directory"):
            directory = _take_value(tokens, i, token)
            i += 1
        elif token == "--log-file":
            log_file = _take_value(tokens, i, token)
            i += 1
        elif token in ("-e", "--extensions"):
            values = _take_list(tokens, i)
            include.extend(values)
            i += len(values)
        elif token in ("-i", "--ignore"):
            values = _take_list(tokens, i)
            exclude.extend(values)
            i += len(values)
        elif token in switches:
            flags[switches[token]] = True
        elif token in ("-h", "--help"):
            raise HelpRequested(token)
        else:
            raise ConfigError(f"Unknown argument {token}")
        i += 1

    return TidyConfig.create(directory, include, exclude, log_file=log_file, **flags)
