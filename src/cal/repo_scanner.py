"""
Repository Batch Scanner

Clones a repository into a throwaway workspace and runs the static audit over
every Solidity file, a few files at a time with a pause between batches to
stay under the model provider's rate limits.
"""

import logging
import os
import shutil
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from config import RampartConfig
from errors import RepositoryCloneError
from models.report import FileAnalysisEntry
from agent.static_audit import StaticAuditAdapter
from utils.correlation import bind_context, generate_analysis_id, get_analysis_id
from utils.logging import AnalysisLogger
from utils.process import ProcessRunner

logger = logging.getLogger(__name__)


class FileOutcome(Enum):
    ANALYZED = "analyzed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileResult:
    relative_path: str
    outcome: FileOutcome
    entry: Optional[FileAnalysisEntry] = None


def walk_source_files(root: Path, extension: str = ".sol") -> Iterator[Path]:
    """
    Yield files under root ending in extension, depth-first, names sorted.

    Iterative so deep trees cannot exhaust the recursion limit. Unreadable
    directories are logged and treated as empty. Symlinks are never followed,
    so a checkout cannot point the walk at files outside root.
    """
    stack = [Path(root)]
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("cannot read directory %s: %s", directory, e)
            continue

        subdirs = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if entry.name != ".git":
                        subdirs.append(Path(entry.path))
                elif entry.name.endswith(extension) and entry.is_file(follow_symlinks=False):
                    yield Path(entry.path)
            except OSError as e:
                logger.warning("cannot stat %s: %s", entry.path, e)
        # reversed so the alphabetically first subdirectory is popped first
        stack.extend(reversed(subdirs))


def batched(items: List, size: int) -> Iterator[List]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class RepositoryScanner:
    ENGINE = "repo_scan"

    def __init__(
        self,
        runner: ProcessRunner,
        static_adapter: StaticAuditAdapter,
        settings: RampartConfig,
        analysis_logger: Optional[AnalysisLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runner = runner
        self.static_adapter = static_adapter
        self.settings = settings
        self.analysis_logger = analysis_logger
        self._sleep = sleep

    def scan(self, repo_url: str) -> List[FileAnalysisEntry]:
        """
        Clone repo_url and audit its source files.

        Returns entries in discovery order. Files that are too short or whose
        analysis failed are absent.

        Raises:
            RepositoryCloneError: the clone did not succeed
        """
        started = time.time()
        workspace = self.prepare_workspace()
        try:
            self.clone(repo_url, workspace)
            files = list(walk_source_files(workspace, self.settings.SOURCE_EXTENSION))
            logger.info("found %d %s files in %s", len(files), self.settings.SOURCE_EXTENSION, repo_url)

            results: List[FileResult] = []
            batches = list(batched(files, self.settings.SCAN_BATCH_SIZE))
            for index, batch in enumerate(batches):
                results.extend(self._run_batch(workspace, batch))
                if index < len(batches) - 1:
                    self._sleep(self.settings.SCAN_BATCH_DELAY_MS / 1000.0)

            entries = [r.entry for r in results if r.outcome == FileOutcome.ANALYZED]
            if self.analysis_logger is not None:
                self.analysis_logger.log_repo_scan(
                    repository=repo_url,
                    files_discovered=len(files),
                    files_analyzed=len(entries),
                    files_skipped=sum(1 for r in results if r.outcome == FileOutcome.SKIPPED),
                    files_failed=sum(1 for r in results if r.outcome == FileOutcome.FAILED),
                    batches=len(batches),
                    duration_seconds=round(time.time() - started, 3),
                )
            return entries
        finally:
            shutil.rmtree(workspace, ignore_errors=True)

    def prepare_workspace(self) -> Path:
        """fresh, empty directory owned by this scan"""
        analysis_id = get_analysis_id() or generate_analysis_id()
        workspace = Path(self.settings.WORKSPACE_ROOT) / f"scan-{analysis_id}"
        if workspace.exists():
            shutil.rmtree(workspace)
        workspace.mkdir(parents=True)
        return workspace

    def clone(self, repo_url: str, destination: Path) -> None:
        try:
            result = self.runner.run("git", ["clone", "--depth", "1", "--", repo_url, str(destination)])
        except OSError as e:
            raise RepositoryCloneError(f"could not launch git: {e}") from e
        if not result.ok:
            raise RepositoryCloneError(
                f"git clone of {repo_url} failed (exit {result.exit_code}): {result.stderr.strip()[:500]}"
            )

    def _run_batch(self, workspace: Path, batch: List[Path]) -> List[FileResult]:
        with ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="scan") as executor:
            # map keeps input order
            return list(executor.map(bind_context(self._analyze_file), [workspace] * len(batch), batch))

    def _analyze_file(self, workspace: Path, path: Path) -> FileResult:
        relative = path.relative_to(workspace).as_posix()
        try:
            content = path.read_text(encoding="utf-8")
            if len(content.strip()) < self.settings.SCAN_MIN_CONTENT_LENGTH:
                logger.debug("skipping %s (too short)", relative)
                return FileResult(relative, FileOutcome.SKIPPED)
            analysis = self.static_adapter.analyze(content)
        except Exception as e:
            logger.error("Skipping analysis for %s: %s", relative, e)
            if self.analysis_logger is not None:
                self.analysis_logger.log_error(self.ENGINE, type(e).__name__, str(e),
                                               context={"file": relative})
            return FileResult(relative, FileOutcome.FAILED)
        return FileResult(relative, FileOutcome.ANALYZED,
                          FileAnalysisEntry(relative_path=relative, analysis=analysis))
