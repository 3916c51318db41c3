# Extension routing table and file classification

from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import AbstractSet, Dict, List, Mapping, NamedTuple, Optional


# Default routing table: extension (lowercase, no dot) -> category folder
DEFAULT_RULES: Mapping[str, str] = MappingProxyType({
    "png": "images",
    "jpg": "images",
    "jpeg": "images",
    "py": "python",
    "cpp": "c++",
})


class SkipReason(Enum):
    """Why a file was left in place"""
    NO_EXTENSION = "no extension"
    UNMAPPED = "unmapped extension"
    NOT_INCLUDED = "not in include list"
    EXCLUDED = "in ignore list"


class Classification(NamedTuple):
    """Outcome of classifying a single directory entry"""
    name: str
    extension: str
    category: Optional[str]
    skip_reason: Optional[SkipReason]

    @property
    def should_move(self) -> bool:
        return self.skip_reason is None


class RoutingTable:
    """
    Read-only mapping from file extension to destination category

    The table is built once and never mutated, so a single instance can be
    shared freely.
    """

    def __init__(self, rules: Mapping[str, str] = DEFAULT_RULES):
        normalized = {}
        for ext, category in rules.items():
            normalized[normalize_extension(ext)] = category
        self._rules = MappingProxyType(normalized)

    def __contains__(self, extension: str) -> bool:
        return extension in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def get_category(self, extension: str) -> Optional[str]:
        """Return the category for `extension`, or None if unmapped"""
        return self._rules.get(extension)

    def get_categories(self) -> List[str]:
        """Unique category names, in the order they first appear"""
        return list(dict.fromkeys(self._rules.values()))

    def get_destination_dirs(self, root: Path) -> List[Path]:
        """
        Destination folders for every category under `root`

        Args:
            root: The directory being tidied

        Returns:
            One path per unique category
        """
        return [root / category for category in self.get_categories()]

    def get_all_rules(self) -> Dict[str, List[str]]:
        """Category name -> extensions routed to it"""
        rules: Dict[str, List[str]] = {}
        for ext, category in self._rules.items():
            rules.setdefault(category, []).append(ext)
        return rules


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and drop a single leading dot"""
    extension = extension.strip().lower()
    if extension.startswith('.'):
        extension = extension[1:]
    return extension


def get_extension(file_name: str) -> str:
    """
    Extension of a file name: the text after the final '.', lowercased

    A name without a '.' or ending in '.' has an empty extension.
    """
    _, dot, suffix = file_name.rpartition('.')
    if not dot:
        return ""
    return suffix.lower()


def classify(file_name: str,
             table: "RoutingTable",
             include: AbstractSet[str] = frozenset(),
             exclude: AbstractSet[str] = frozenset()) -> Classification:
    """
    Decide whether a file should be moved and where

    Checks run in order: empty extension, unmapped extension, include
    filter, exclude filter. An extension in both filters is skipped.

    Args:
        file_name: Bare file name (no directory part)
        table: Routing table to look the extension up in
        include: Allow-list; empty means every mapped extension
        exclude: Deny-list

    Returns:
        Classification with `skip_reason` None when the file moves
    """
    extension = get_extension(file_name)

    if not extension:
        return Classification(file_name, extension, None, SkipReason.NO_EXTENSION)

    category = table.get_category(extension)
    if category is None:
        return Classification(file_name, extension, None, SkipReason.UNMAPPED)

    if include and extension not in include:
        return Classification(file_name, extension, category, SkipReason.NOT_INCLUDED)

    if extension in exclude:
        return Classification(file_name, extension, category, SkipReason.EXCLUDED)

    return Classification(file_name, extension, category, None)


# Global routing table instance
_global_table: Optional[RoutingTable] = None


def get_routing_table() -> RoutingTable:
    """
    Get or create the global routing table

    Returns:
        RoutingTable built from DEFAULT_RULES
    """
    global _global_table
    if _global_table is None:
        _global_table = RoutingTable()
    return _global_table
