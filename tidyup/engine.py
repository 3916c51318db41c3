# Tidy engine - provisioning, scanning and relocation

import errno
import os
import stat
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .config import TidyConfig
from .routing import Classification, RoutingTable, SkipReason, classify, get_routing_table
from .utils.errors import TidyIOError
from .utils.logger import get_logger


ProgressCallback = Callable[[int, int, Classification], None]


class TidyReport:
    """Results of a completed tidy run"""

    def __init__(self, directory: Path, dry_run: bool = False):
        self.directory = directory
        self.dry_run = dry_run
        self.total_files = 0
        self.moved: List[Tuple[Path, Path]] = []
        self.skipped: Dict[SkipReason, int] = {reason: 0 for reason in SkipReason}
        self.folders_created: List[Path] = []
        self.operation_time = 0.0

    @property
    def moved_count(self) -> int:
        return len(self.moved)

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped.values())

    def add_moved_file(self, source: Path, destination: Path):
        self.moved.append((source, destination))

    def add_skipped_file(self, reason: SkipReason):
        self.skipped[reason] += 1

    def get_summary(self) -> Dict:
        """Get operation summary"""
        return {
            "directory": str(self.directory),
            "total_files": self.total_files,
            "moved_files": self.moved_count,
            "skipped_files": self.skipped_count,
            "skipped_by_reason": {
                reason.value: count for reason, count in self.skipped.items() if count
            },
            "folders_created": len(self.folders_created),
            "operation_time": round(self.operation_time, 2),
            "dry_run": self.dry_run,
        }


class TidyEngine:
    """
    Single-pass directory tidier

    For a given configuration the engine:
    - checks the target is an existing directory
    - creates one folder per routing category (if absent)
    - lists the target's immediate entries, skipping non-files
    - classifies each file and renames matching ones into their folder

    Any filesystem failure raises TidyIOError and stops the run; nothing is
    retried and no partial results are returned. Files already present at a
    destination are overwritten.
    """

    def __init__(self, routing_table: Optional[RoutingTable] = None):
        self.logger = get_logger()
        self.routing_table = routing_table or get_routing_table()

    def run(self, config: TidyConfig,
            progress_callback: Optional[ProgressCallback] = None) -> TidyReport:
        """
        Tidy `config.directory`

        Args:
            config: Resolved run configuration
            progress_callback: Called as (index, total, classification)
                after each file entry is handled

        Returns:
            TidyReport describing what was moved and skipped

        Raises:
            TidyIOError: On the first filesystem failure
        """
        root = config.directory
        report = TidyReport(root, dry_run=config.dry_run)
        operation_id = f"tidy_{int(time.time())}"
        start_time = time.time()

        self.logger.log_operation_start(operation_id, f"Directory: {root}")

        try:
            self.validate_directory(root)
            report.folders_created = self.provision_directories(root, dry_run=config.dry_run)
            files = self.scan_files(root)
            report.total_files = len(files)

            for index, file_path in enumerate(files, start=1):
                result = classify(file_path.name, self.routing_table,
                                  config.include_extensions, config.exclude_extensions)

                if result.should_move:
                    destination = root / result.category / file_path.name
                    self.move_file(file_path, destination, dry_run=config.dry_run)
                    report.add_moved_file(file_path, destination)
                else:
                    report.add_skipped_file(result.skip_reason)
                    self.logger.log_file_action(
                        f"SKIP ({result.skip_reason.value})", file_path.name, dry_run=config.dry_run
                    )

                if progress_callback:
                    progress_callback(index, report.total_files, result)

        except TidyIOError as e:
            self.logger.log_operation_error(operation_id, str(e))
            raise

        report.operation_time = time.time() - start_time
        self.logger.log_operation_success(
            operation_id, f"Moved {report.moved_count}/{report.total_files} files"
        )
        self.logger.log_stats(report.get_summary())
        return report

    def validate_directory(self, root: Path):
        """Fail before any change if `root` is missing or not a directory"""
        try:
            mode = root.stat().st_mode
        except OSError as e:
            raise TidyIOError(root, e, action="open directory") from e

        if not stat.S_ISDIR(mode):
            cause = NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(root))
            raise TidyIOError(root, cause, action="open directory") from cause

    def provision_directories(self, root: Path, dry_run: bool = False) -> List[Path]:
        """
        Create the category folders under `root`

        Already existing folders are left alone, so calling this twice is
        harmless.

        Args:
            root: Directory being tidied
            dry_run: Only report which folders are missing

        Returns:
            Folders that were (or, in dry-run mode, would be) created
        """
        created = []

        for folder in self.routing_table.get_destination_dirs(root):
            try:
                if folder.is_dir():
                    continue
                if not dry_run:
                    folder.mkdir(exist_ok=True)
            except OSError as e:
                raise TidyIOError(folder, e, action="create directory") from e

            created.append(folder)
            self.logger.log_file_action("CREATE", str(folder), dry_run=dry_run)

        return created

    def scan_files(self, root: Path) -> List[Path]:
        """
        Regular files directly inside `root`, sorted by name

        Subdirectories (and symlinks to them) are skipped and never
        descended into. The listing is taken before anything is moved.
        """
        files = []

        try:
            with os.scandir(root) as entries:
                snapshot = sorted(entries, key=lambda entry: entry.name)
        except OSError as e:
            raise TidyIOError(root, e, action="list directory") from e

        for entry in snapshot:
            try:
                is_file = entry.is_file()
            except OSError as e:
                raise TidyIOError(entry.path, e, action="read metadata of") from e

            if is_file:
                files.append(Path(entry.path))

        self.logger.debug(f"📊 Found {len(files)} files in {root}")
        return files

    def move_file(self, source: Path, destination: Path, dry_run: bool = False):
        """Rename `source` to `destination`, replacing any existing file"""
        if not dry_run:
            try:
                source.replace(destination)
            except OSError as e:
                raise TidyIOError(source, e, action="move") from e

        self.logger.log_file_action("MOVE", str(source), str(destination), dry_run)


# Global engine instance
_global_engine: Optional[TidyEngine] = None


def get_engine() -> TidyEngine:
    """
    Get or create the global engine instance

    Returns:
        TidyEngine using the default routing table
    """
    global _global_engine
    if _global_engine is None:
        _global_engine = TidyEngine()
    return _global_engine


def tidy_directory(config: TidyConfig,
                   progress_callback: Optional[ProgressCallback] = None) -> TidyReport:
    """Quick tidy run with the global engine"""
    return get_engine().run(config, progress_callback)
