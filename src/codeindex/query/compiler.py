"""
Structured Query Compiler

Turns a SearchRequest into a parameterized SELECT over the symbols table.

Matching semantics:
- Text terms match as case-insensitive (ASCII) substrings via LIKE. The
  characters %, _ and the escape character are escaped, so user text never
  acts as a wildcard.
- "Container::symbol" scopes a name search to an enclosing class or package.
  Only the first separator splits; the symbol term keeps any later "::".
- file_path_glob uses SQLite GLOB: '*' any run of characters, '?' a single
  character. GLOB is case-sensitive.
- All clauses are ANDed; a blank query adds no text clause at all.
- Every query ends with LIMIT; there is no ORDER BY, so row order is
  whatever SQLite produces.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from codeindex.schemas import SYMBOL_COLUMNS, SearchRequest, SymbolKind
from .config import CONTAINER_SEPARATOR, DEFAULT_LIMIT, LIKE_ESCAPE

SELECT_SYMBOLS_SQL = f"SELECT {', '.join(SYMBOL_COLUMNS)} FROM symbols"


@dataclass(frozen=True)
class CompiledQuery:
    """
    Executable form of a SearchRequest.
    """
    sql: str
    params: Tuple
    limit: int


def like_pattern(term: str) -> str:
    """Wrap a term in % wildcards, escaping LIKE metacharacters."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _like(column: str) -> str:
    return f"{column} LIKE ? ESCAPE '{LIKE_ESCAPE}'"


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _text_clause(query: str) -> Tuple[str, List[str]]:
    if CONTAINER_SEPARATOR in query:
        container_term, _, symbol_term = query.partition(CONTAINER_SEPARATOR)
        container = like_pattern(container_term)
        return (
            f"{_like('name')} AND ({_like('class_name')} OR {_like('package_name')})",
            [like_pattern(symbol_term), container, container],
        )

    pattern = like_pattern(query)
    return (
        f"({_like('name')} OR {_like('class_name')} OR {_like('package_name')})",
        [pattern, pattern, pattern],
    )


def compile_request(request: SearchRequest) -> CompiledQuery:
    """
    Compile a search request into SQL.

    Never raises for a valid SearchRequest; conflicting filters simply
    produce a query that matches nothing.

    Args:
        request: The structured search

    Returns:
        CompiledQuery with SQL, positional parameters and the row limit
    """
    clauses: List[str] = []
    params: List = []

    if _present(request.query):
        clause, clause_params = _text_clause(request.query)
        clauses.append(clause)
        params.extend(clause_params)

    if _present(request.class_name):
        clauses.append(_like("class_name"))
        params.append(like_pattern(request.class_name))

    if _present(request.package_name):
        clauses.append(_like("package_name"))
        params.append(like_pattern(request.package_name))

    if _present(request.file_path_glob):
        clauses.append("file_path GLOB ?")
        params.append(request.file_path_glob)

    if request.kinds:
        names = sorted(SymbolKind(k).name for k in request.kinds)
        clauses.append(f"kind IN ({', '.join('?' * len(names))})")
        params.extend(names)

    limit = DEFAULT_LIMIT if request.limit is None else request.limit

    sql = SELECT_SYMBOLS_SQL
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " LIMIT ?"
    params.append(limit)

    return CompiledQuery(sql=sql, params=tuple(params), limit=limit)
