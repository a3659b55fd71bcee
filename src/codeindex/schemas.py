from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Line number recorded when a parser cannot locate the source position
UNKNOWN_LINE = -1

# Column order of the persisted symbols table
SYMBOL_COLUMNS = (
    "name",
    "class_name",
    "package_name",
    "kind",
    "file_path",
    "line",
    "signature",
    "reference_to",
)


class SymbolKind(str, Enum):
    """
    Category tag of a symbol. Stored in the index by its symbolic name.
    """
    CLASS = "CLASS"
    INTERFACE = "INTERFACE"
    METHOD = "METHOD"
    FIELD = "FIELD"
    VARIABLE = "VARIABLE"
    REFERENCE = "REFERENCE"

    @classmethod
    def parse(cls, text: str) -> "SymbolKind":
        """Case-insensitive lookup by name, e.g. 'method' -> SymbolKind.METHOD."""
        try:
            return cls[text.strip().upper()]
        except KeyError:
            valid = ", ".join(k.name for k in cls)
            raise ValueError(f"Unknown symbol kind '{text}'. Valid kinds: {valid}") from None

    def __str__(self) -> str:
        return self.value


class Symbol(BaseModel):
    """
    One occurrence of a named program element (declaration or reference).

    Immutable once constructed; equality and hashing use every field.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    kind: SymbolKind
    file_path: str = Field(min_length=1)  # Relative to the indexed project root
    line: int
    class_name: Optional[str] = None  # Enclosing type, None for top-level symbols
    package_name: Optional[str] = None  # Enclosing namespace
    signature: Optional[str] = None
    reference_to: Optional[str] = None  # Resolved target, REFERENCE kind only

    @field_validator("line")
    @classmethod
    def _check_line(cls, value: int) -> int:
        if value < 1 and value != UNKNOWN_LINE:
            raise ValueError(f"line must be >= 1 or {UNKNOWN_LINE}, got {value}")
        return value

    @property
    def display_name(self) -> str:
        if self.class_name:
            return f"{self.class_name}::{self.name}"
        return self.name


class SearchRequest(BaseModel):
    """
    Structured symbol query. Every field is optional; an empty request
    matches everything up to ``limit``.
    """
    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    kinds: Optional[FrozenSet[SymbolKind]] = None
    class_name: Optional[str] = None
    package_name: Optional[str] = None
    file_path_glob: Optional[str] = None
    limit: Optional[int] = Field(default=1000, ge=0)

    @classmethod
    def build(
        cls,
        query: Optional[str] = None,
        kinds: Optional[Iterable[Union[SymbolKind, str]]] = None,
        class_name: Optional[str] = None,
        package_name: Optional[str] = None,
        file_path_glob: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> "SearchRequest":
        """
        Convenience constructor accepting kind names as strings and
        treating ``limit=None`` as "use the default".
        """
        parsed_kinds = None
        if kinds:
            parsed_kinds = frozenset(
                k if isinstance(k, SymbolKind) else SymbolKind.parse(k) for k in kinds
            )
        fields = dict(
            query=query,
            kinds=parsed_kinds,
            class_name=class_name,
            package_name=package_name,
            file_path_glob=file_path_glob,
        )
        if limit is not None:
            fields["limit"] = limit
        return cls(**fields)


class IndexState(str, Enum):
    """Lifecycle of a single indexing run."""
    NOT_STARTED = "NOT_STARTED"
    CRAWLING = "CRAWLING"
    PARSING = "PARSING"
    SAVING = "SAVING"
    COMPLETE = "COMPLETE"


class FileFailure(BaseModel):
    """
    A file skipped because parsing or saving it failed.
    """
    file_path: str
    error: str


class IndexRunReport(BaseModel):
    """
    Summary of one indexing run.
    """
    project_root: str
    files_seen: int = 0
    files_indexed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    symbols_saved: int = 0
    failures: List[FileFailure] = Field(default_factory=list)
    duration_seconds: float = 0.0
    state: IndexState = IndexState.NOT_STARTED


class IndexStats(BaseModel):
    """
    Aggregate statistics for an index.
    """
    total_symbols: int
    total_files: int
    symbol_kinds: Dict[str, int] = Field(default_factory=dict)
    db_size_bytes: int = 0
    schema_version: Optional[str] = None
