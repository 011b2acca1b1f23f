"""
Archive File Management

This module owns the on-disk snapshot archive layout:

    archive/<identifier>/page.html
    archive/<identifier>/page.txt
    archive/<identifier>/meta.json

Capture uses it to pick a collision-free directory and persist a record;
the index builder uses it to enumerate directories and read metadata.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple
import logging

from pagevault.core.errors import SkippedRecord
from pagevault.utils.identifiers import make_identifier


PAGE_HTML = "page.html"
PAGE_TEXT = "page.txt"
META_JSON = "meta.json"

SNAPSHOT_FILES = (PAGE_HTML, PAGE_TEXT, META_JSON)


@dataclass
class ArchivedSnapshot:
    """A snapshot directory whose metadata parsed cleanly."""
    url: str
    timestamp: str
    dir_name: str
    dir_path: Path
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def html_path(self) -> Path:
        return self.dir_path / PAGE_HTML

    @property
    def text_path(self) -> Path:
        return self.dir_path / PAGE_TEXT

    @property
    def meta_path(self) -> Path:
        return self.dir_path / META_JSON

    def missing_files(self) -> list:
        """Names of the snapshot artifacts that are not on disk."""
        return [name for name in SNAPSHOT_FILES if not (self.dir_path / name).is_file()]


def dump_json(data: Any) -> str:
    """Serialize as two-space indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class SnapshotStore:
    """
    Reads and writes snapshot directories under an archive root.

    The archive is append-only: directories are created once and never
    modified or removed here.
    """

    def __init__(self, archive_root: os.PathLike):
        """
        Initialize the store.

        Args:
            archive_root: Directory holding one subdirectory per snapshot
        """
        self.archive_root = Path(archive_root)
        self.logger = logging.getLogger(__name__)

    def ensure_unique_dir(self, base_name: str) -> Tuple[str, Path]:
        """
        Find a snapshot directory name that is not taken yet.

        Tries ``base_name``, then ``base_name-dup1``, ``base_name-dup2``, ...
        Nothing is created on disk.

        Args:
            base_name: Identifier base

        Returns:
            Tuple of (snapshot_dir_name, snapshot_dir_path)
        """
        duplicate = 0
        dir_name = base_name
        dir_path = self.archive_root / dir_name

        while dir_path.exists():
            duplicate += 1
            dir_name = make_identifier(base_name, duplicate)
            dir_path = self.archive_root / dir_name

        if duplicate:
            self.logger.debug(f"Identifier {base_name} taken, using {dir_name}")

        return dir_name, dir_path

    def write_snapshot(self,
                       dir_path: Path,
                       html: str,
                       text: str,
                       metadata: Dict[str, Any]) -> Dict[str, Path]:
        """
        Persist one snapshot record.

        The metadata file is written last through an atomic rename, so a
        directory only becomes visible to readers once all files exist.

        Args:
            dir_path: Snapshot directory (must not exist yet)
            html: Rendered markup
            text: Extracted readable text
            metadata: Metadata document

        Returns:
            Dictionary with 'html', 'text' and 'meta' paths
        """
        dir_path.mkdir(parents=True, exist_ok=False)

        html_path = dir_path / PAGE_HTML
        text_path = dir_path / PAGE_TEXT
        meta_path = dir_path / META_JSON

        html_path.write_text(html, encoding='utf-8')
        text_path.write_text(text, encoding='utf-8')
        self._atomic_write(meta_path, dump_json(metadata))

        self.logger.info(f"Saved snapshot ({len(html.encode('utf-8'))} bytes HTML): {dir_path.name}")

        return {'html': html_path, 'text': text_path, 'meta': meta_path}

    def _atomic_write(self, path: Path, content: str) -> None:
        """Write ``content`` to a sibling temp file, then rename it into place."""
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def iter_snapshot_dirs(self) -> Iterator[Path]:
        """
        Yield immediate subdirectories of the archive in sorted name order.

        A missing archive root yields nothing.
        """
        if not self.archive_root.is_dir():
            return
        for entry in sorted(self.archive_root.iterdir(), key=lambda p: p.name):
            if entry.is_dir():
                yield entry

    def read_snapshot(self, dir_path: Path) -> ArchivedSnapshot:
        """
        Load a snapshot directory's metadata.

        Args:
            dir_path: Snapshot directory

        Returns:
            ArchivedSnapshot for the directory

        Raises:
            SkippedRecord: If the metadata is missing, unparsable, or lacks
                string ``url`` and ``timestamp`` fields
        """
        meta_path = dir_path / META_JSON
        if not meta_path.is_file():
            raise SkippedRecord(dir_path.name, "missing meta.json")

        try:
            with open(meta_path, 'r', encoding='utf-8') as f:
                meta = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SkippedRecord(dir_path.name, f"unreadable meta.json ({e})") from e

        if not isinstance(meta, dict):
            raise SkippedRecord(dir_path.name, "meta.json is not an object")
        if not isinstance(meta.get('url'), str):
            raise SkippedRecord(dir_path.name, "meta.json has no string 'url'")
        if not isinstance(meta.get('timestamp'), str):
            raise SkippedRecord(dir_path.name, "meta.json has no string 'timestamp'")

        return ArchivedSnapshot(
            url=meta['url'],
            timestamp=meta['timestamp'],
            dir_name=dir_path.name,
            dir_path=dir_path,
            metadata=meta,
        )
