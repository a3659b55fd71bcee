import time
from pathlib import Path, PurePath
from typing import List, Optional, Union

from codeindex.logging_config import logger
from codeindex.parser import ParserRegistry, default_registry
from codeindex.scanner import crawl
from codeindex.schemas import FileFailure, IndexRunReport, IndexState, SearchRequest, Symbol
from codeindex.storage import SQLiteStorage
from codeindex.tracing import trace
from .config import MAX_LOGGED_FAILURES, PROGRESS_LOG_INTERVAL


def normalize_symbol_path(symbol: Symbol, project_root: Path) -> Symbol:
    """
    Return the symbol with a root-relative, '/'-separated file path.

    Raises:
        ValueError: If the symbol's path resolves outside project_root, either
            as an absolute path or through a ".." component
    """
    path = PurePath(symbol.file_path)
    if not path.is_absolute():
        normalized = path.as_posix()
    else:
        normalized = None
        for root in (project_root.absolute(), project_root.resolve()):
            try:
                normalized = path.relative_to(root).as_posix()
                break
            except ValueError:
                continue
        if normalized is None:
            raise ValueError(f"Symbol path '{symbol.file_path}' is outside project root '{project_root}'")

    if ".." in PurePath(normalized).parts:
        raise ValueError(f"Symbol path '{symbol.file_path}' is outside project root '{project_root}'")

    if normalized == symbol.file_path:
        return symbol
    return symbol.model_copy(update={"file_path": normalized})


class CodeIndexer:
    """
    Drives one indexing run: crawl, parse each file, save its symbols.

    A file that fails to parse, normalize or save is logged and recorded in
    the run report; the remaining files are still indexed.

    Args:
        db_path: Index database location
        registry: Parsers to use (defaults to the built-in registry)
    """

    def __init__(self, db_path: Union[str, Path], registry: Optional[ParserRegistry] = None):
        self.db_path = Path(db_path)
        self.registry = registry if registry is not None else default_registry()
        self.state = IndexState.NOT_STARTED

    @trace
    def index(
        self,
        project_root: Union[str, Path],
        fresh: bool = False,
        respect_gitignore: bool = False,
        max_bytes: Optional[int] = None,
    ) -> IndexRunReport:
        """
        Index every supported file under project_root.

        Symbols are appended to whatever the index already holds unless
        ``fresh`` is set, in which case the index is emptied first.

        Raises:
            InvalidRootError: If project_root is not a directory
            IndexCorruptionError: If the index cannot be opened
        """
        start_time = time.perf_counter()
        root = Path(project_root)
        report = IndexRunReport(project_root=str(root))

        self.state = IndexState.CRAWLING
        report.state = self.state
        files = crawl(
            root,
            self.registry.supported_extensions(),
            respect_gitignore=respect_gitignore,
            max_bytes=max_bytes,
        )
        report.files_seen = len(files)
        logger.info(f"Indexing {len(files)} files from '{root}' into '{self.db_path}'")

        with SQLiteStorage(self.db_path) as store:
            if fresh:
                store.truncate()

            for position, file_path in enumerate(files, start=1):
                self._index_file(store, root, file_path, report)
                if position % PROGRESS_LOG_INTERVAL == 0:
                    logger.info(f"Progress: {position}/{len(files)} files")

        self.state = IndexState.COMPLETE
        report.state = self.state
        report.duration_seconds = time.perf_counter() - start_time
        self._log_summary(report)
        return report

    def _index_file(self, store: SQLiteStorage, root: Path, file_path: Path, report: IndexRunReport) -> None:
        display_path = _display_path(file_path, root)

        self.state = IndexState.PARSING
        parser = self.registry.parser_for(file_path)
        if parser is None:
            report.files_skipped += 1
            return

        try:
            symbols = parser.parse(file_path, root)
            symbols = [normalize_symbol_path(s, root) for s in symbols]

            self.state = IndexState.SAVING
            saved = store.save_symbols(symbols)
        except Exception as e:
            logger.error(f"Failed to index '{display_path}': {e}")
            report.files_failed += 1
            report.failures.append(FileFailure(file_path=display_path, error=str(e)))
            return

        report.files_indexed += 1
        report.symbols_saved += saved
        logger.debug(f"Indexed '{display_path}': {saved} symbols")

    def _log_summary(self, report: IndexRunReport) -> None:
        logger.info(
            f"Index run complete: {report.files_indexed} indexed, {report.files_failed} failed, "
            f"{report.files_skipped} skipped, {report.symbols_saved} symbols "
            f"in {report.duration_seconds:.2f}s"
        )
        for failure in report.failures[:MAX_LOGGED_FAILURES]:
            logger.warning(f"  - {failure.file_path}: {failure.error}")

    def search(self, request: Union[SearchRequest, str]) -> List[Symbol]:
        """Run a search against this indexer's database."""
        with SQLiteStorage(self.db_path) as store:
            return store.search(request)


def _display_path(file_path: Path, root: Path) -> str:
    try:
        return file_path.relative_to(root).as_posix()
    except ValueError:
        return str(file_path)
