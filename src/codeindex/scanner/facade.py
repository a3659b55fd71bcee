import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pathspec

from codeindex.exceptions import InvalidRootError
from codeindex.logging_config import logger
from .config import (
    DEFAULT_IGNORE_PATTERNS,
    validate_extensions,
    validate_ignore_patterns,
    validate_max_bytes,
)


def load_ignore_spec(directory: Path, extra_patterns: Optional[List[str]] = None) -> pathspec.PathSpec:
    """
    Build a gitignore matcher from the default patterns, the root .gitignore
    and any extra patterns.
    """
    all_patterns = list(DEFAULT_IGNORE_PATTERNS)
    if extra_patterns:
        validate_ignore_patterns(extra_patterns)
        all_patterns.extend(extra_patterns)

    gitignore_path = directory / ".gitignore"
    if gitignore_path.is_file():
        try:
            gitignore_patterns = gitignore_path.read_text(encoding="utf-8").splitlines()
            all_patterns.extend(gitignore_patterns)
            logger.debug(f"Loaded {len(gitignore_patterns)} patterns from '{gitignore_path}'")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read .gitignore file at '{gitignore_path}'. Error: {e}")

    return pathspec.GitIgnoreSpec.from_lines(all_patterns)


def crawl(
    root: Union[str, Path],
    extensions: Iterable[str],
    respect_gitignore: bool = False,
    max_bytes: Optional[int] = None,
    ignore_patterns: Optional[List[str]] = None,
) -> List[Path]:
    """
    Find every regular file under root whose extension is in ``extensions``.

    Directories and files are visited in sorted order so repeated crawls of
    an unchanged tree return the same list.

    Args:
        root: Directory to walk
        extensions: Dot-prefixed suffixes to keep (e.g. {'.py'})
        respect_gitignore: Skip paths matched by default ignore patterns and .gitignore
        max_bytes: Skip files larger than this
        ignore_patterns: Extra gitignore-style patterns (only with respect_gitignore)

    Returns:
        Paths of the qualifying files (root joined with their relative path)

    Raises:
        InvalidRootError: If root does not exist or is not a directory
    """
    directory = Path(root)
    if not directory.is_dir():
        raise InvalidRootError(root)

    allowed_extensions = set(extensions)
    validate_extensions(allowed_extensions)
    if max_bytes is not None:
        validate_max_bytes(max_bytes)

    spec = load_ignore_spec(directory, ignore_patterns) if respect_gitignore else None

    logger.info(f"Crawling '{directory}' for {sorted(allowed_extensions)}")
    found: List[Path] = []

    for current, dirs, files in os.walk(directory):
        current_path = Path(current)

        # Prune ignored directories; os.walk honours in-place edits of dirs
        kept_dirs = []
        for d in sorted(dirs):
            if spec is not None:
                rel_dir = (current_path / d).relative_to(directory).as_posix() + "/"
                if spec.match_file(rel_dir):
                    logger.debug(f"Ignoring directory '{rel_dir}' due to ignore rules")
                    continue
            kept_dirs.append(d)
        dirs[:] = kept_dirs

        for file_name in sorted(files):
            file_path = current_path / file_name
            if file_path.suffix not in allowed_extensions:
                continue
            if not file_path.is_file():
                continue

            relative_path = file_path.relative_to(directory).as_posix()
            if spec is not None and spec.match_file(relative_path):
                logger.debug(f"Ignoring '{relative_path}' due to ignore rules")
                continue

            if max_bytes is not None:
                try:
                    size = file_path.stat().st_size
                except OSError as e:
                    logger.warning(f"Could not stat '{relative_path}': {e}")
                    continue
                if size > max_bytes:
                    logger.debug(f"Skipping '{relative_path}' (size {size} > {max_bytes} bytes)")
                    continue

            found.append(file_path)

    logger.info(f"Crawl complete: {len(found)} files under '{directory}'")
    return found
