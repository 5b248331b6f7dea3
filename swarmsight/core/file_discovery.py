"""File Discovery Module - Walks a project tree and classifies files by language."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


# Extension to language table. A file belongs to at most one language.
LANGUAGE_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    "rust": (".rs",),
    "solidity": (".sol",),
    "go": (".go",),
    "cpp": (".c", ".cc", ".cpp", ".cxx", ".h", ".hpp"),
    "move": (".move",),
}

EXTENSION_LANGUAGE: Dict[str, str] = {
    ext: language
    for language, extensions in LANGUAGE_EXTENSIONS.items()
    for ext in extensions
}


def language_for(path: str | Path) -> Optional[str]:
    """Get the language tag for a file path, or None."""
    return EXTENSION_LANGUAGE.get(Path(path).suffix.lower())


@dataclass
class ProjectIndex:
    """Result of a single project walk."""
    root_path: Path
    files_by_language: Dict[str, List[Path]] = field(default_factory=dict)
    total_files: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def languages(self) -> Set[str]:
        """Get detected language tags."""
        return {lang for lang, files in self.files_by_language.items() if files}

    def get_files(self, language: str) -> List[Path]:
        """Get all files of a specific language."""
        return self.files_by_language.get(language, [])


class ProjectWalker:
    """Traverses a project tree applying exclude rules.

    Excludes match directory names exactly; glob patterns are not supported.
    Hidden directories (names starting with ``.``) are always skipped.
    Symlinked directories are not followed, so link cycles cannot occur.
    """

    def iter_files(
        self,
        root_path: str | Path,
        extensions: Optional[Iterable[str]] = None,
        exclude: Iterable[str] = (),
        errors: Optional[List[str]] = None,
    ) -> Iterator[Path]:
        """Yield files under ``root_path`` in deterministic order.

        Args:
            root_path: Directory (or single file) to walk
            extensions: Only yield files with these suffixes (all if None)
            exclude: Directory names to skip entirely
            errors: Optional list collecting unreadable-directory messages

        Yields:
            File paths
        """
        root_path = Path(root_path)
        wanted = {e.lower() for e in extensions} if extensions is not None else None
        excluded = set(exclude)

        if root_path.is_file():
            if wanted is None or root_path.suffix.lower() in wanted:
                yield root_path
            return

        def on_error(error: OSError) -> None:
            message = f"Cannot read directory {error.filename}: {error.strerror}"
            logger.debug(message)
            if errors is not None:
                errors.append(message)

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=on_error, followlinks=False):
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in excluded and not d.startswith(".")
            )

            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if wanted is not None and file_path.suffix.lower() not in wanted:
                    continue
                yield file_path

    def walk(self, root_path: str | Path, exclude: Iterable[str] = ()) -> ProjectIndex:
        """Walk the tree once and build a language to file-list map.

        Args:
            root_path: Project root
            exclude: Directory names to skip

        Returns:
            ProjectIndex with files grouped by language
        """
        root_path = Path(root_path)
        index = ProjectIndex(root_path=root_path)

        for file_path in self.iter_files(root_path, exclude=exclude, errors=index.errors):
            index.total_files += 1
            language = language_for(file_path)
            if language is None:
                continue
            index.files_by_language.setdefault(language, []).append(file_path)

        return index

    def detect_languages(self, root_path: str | Path, exclude: Iterable[str] = ()) -> Set[str]:
        """Detect which languages are present in a project.

        Args:
            root_path: Project root
            exclude: Directory names to skip

        Returns:
            Set of language tags
        """
        return self.walk(root_path, exclude).languages
