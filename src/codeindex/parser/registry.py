from pathlib import Path
from typing import List, Optional, Set, Union

from codeindex.logging_config import logger
from .protocol import Parser
from .java_parser import JavaParser
from .python_parser import PythonParser


class ParserRegistry:
    """
    Ordered collection of parsers. Lookup returns the first registered
    parser whose supported extensions include the file's suffix.
    """

    def __init__(self):
        self._parsers: List[Parser] = []

    def register(self, parser: Parser) -> "ParserRegistry":
        self._parsers.append(parser)
        logger.debug(
            f"Registered parser {type(parser).__name__} for {sorted(parser.supported_extensions())}"
        )
        return self

    def parser_for(self, path: Union[str, Path]) -> Optional[Parser]:
        suffix = Path(path).suffix
        for parser in self._parsers:
            if suffix in parser.supported_extensions():
                return parser
        return None

    def supported_extensions(self) -> Set[str]:
        extensions: Set[str] = set()
        for parser in self._parsers:
            extensions.update(parser.supported_extensions())
        return extensions

    def __len__(self) -> int:
        return len(self._parsers)


def default_registry() -> ParserRegistry:
    """Registry wired with the built-in parsers."""
    return ParserRegistry().register(PythonParser()).register(JavaParser())
