"""Enumerate documents from files, directories and zip archives.

Every source is read and decoded once, producing the ``(display name, path,
raw text)`` triples that the extractor and the search engine work on.
"""

import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, List, Sequence, Union

from xml_pathfinder.character import decode_document
from xml_pathfinder.shared.logging import get_logger

DEFAULT_EXTENSIONS = (".xml",)
ARCHIVE_EXTENSIONS = (".zip",)

logger = get_logger(__name__, component="sources")


class SourceError(Exception):
    """Raised when a path cannot be read as a document or archive."""


@dataclass(frozen=True)
class DocumentSource:
    """One document ready for navigation."""

    display_name: str
    path: str
    raw_text: str
    archive: str = ""

    @property
    def identifier(self) -> str:
        """Unique name: the archive path followed by the member path, if any."""
        return f"{self.archive}!{self.path}" if self.archive else self.path


def _has_extension(name: str, extensions: Sequence[str]) -> bool:
    return name.lower().endswith(tuple(ext.lower() for ext in extensions))


def _iter_archive(
    archive_path: Path, extensions: Sequence[str]
) -> Iterator[DocumentSource]:
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                if info.is_dir() or not _has_extension(info.filename, extensions):
                    continue
                decoded = decode_document(archive.read(info))
                if decoded.issues:
                    logger.warning(
                        "Archive member decoded with issues",
                        extra={"member": info.filename, "issues": decoded.issues},
                    )
                yield DocumentSource(
                    display_name=PurePosixPath(info.filename).name,
                    path=info.filename,
                    raw_text=decoded.text,
                    archive=str(archive_path),
                )
    except (zipfile.BadZipFile, OSError) as e:
        raise SourceError(f"Could not read archive {archive_path}: {e}") from e


def _read_file(file_path: Path) -> DocumentSource:
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise SourceError(f"Could not read {file_path}: {e}") from e
    decoded = decode_document(data)
    if decoded.issues:
        logger.warning(
            "File decoded with issues",
            extra={"file": str(file_path), "issues": decoded.issues},
        )
    return DocumentSource(
        display_name=file_path.name, path=str(file_path), raw_text=decoded.text
    )


def iter_sources(
    paths: Iterable[Union[str, Path]],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    recursive: bool = True,
) -> Iterator[DocumentSource]:
    """Yield documents from files, directories and zip archives.

    Archives are expanded into their matching members. Directories are
    walked in sorted order so that results are reproducible.

    Args:
        paths: Files, directories or archives
        extensions: File name suffixes treated as documents
        recursive: Descend into sub-directories

    Raises:
        SourceError: If a path does not exist or cannot be read
    """
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            pattern = "**/*" if recursive else "*"
            for child in sorted(path.glob(pattern)):
                if not child.is_file():
                    continue
                if _has_extension(child.name, ARCHIVE_EXTENSIONS):
                    yield from _iter_archive(child, extensions)
                elif _has_extension(child.name, extensions):
                    yield _read_file(child)
        elif path.is_file():
            if _has_extension(path.name, ARCHIVE_EXTENSIONS):
                yield from _iter_archive(path, extensions)
            else:
                yield _read_file(path)
        else:
            raise SourceError(f"Path not found: {path}")


def load_sources(
    paths: Iterable[Union[str, Path]],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    recursive: bool = True,
) -> List[DocumentSource]:
    """Load every document and sort by display name, as a file browser lists them."""
    sources = list(iter_sources(paths, extensions, recursive))
    sources.sort(key=lambda source: source.display_name)
    return sources
