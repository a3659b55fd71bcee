from pathlib import Path
from typing import List, Protocol, Set, runtime_checkable

from codeindex.schemas import Symbol


@runtime_checkable
class Parser(Protocol):
    """
    A language parser the indexer can drive.

    ``parse`` returns symbols whose ``file_path`` is relative to
    ``source_root`` and raises ParserError only when the whole file cannot
    be read or parsed.
    """

    def supported_extensions(self) -> Set[str]:
        """Dot-prefixed suffixes this parser accepts, e.g. {'.py'}."""
        ...

    def parse(self, path: Path, source_root: Path) -> List[Symbol]:
        ...
