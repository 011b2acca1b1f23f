"""
Latest-View Index Builder

Rebuilds the derived "latest" view from the snapshot archive:

    docs/latest/<slug>.html|.txt|.meta.json|.meta.txt
    docs/latest/index.json
    docs/index.html

The output is a pure function of the archive contents. The latest
directory is wiped and regenerated on every run; nothing is updated
incrementally.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import SkippedRecord
from .logger import ErrorTracker
from pagevault.utils.file_manager import ArchivedSnapshot, SnapshotStore
from pagevault.utils.identifiers import sort_key
from pagevault.utils.listing import write_listing
from pagevault.utils.manifest import (
    DEFAULT_MANIFEST_NAME,
    LATEST_DIR_NAME,
    LatestEntry,
    render_metadata_text,
    write_manifest,
)
from pagevault.utils.slugs import SlugAllocator


DEFAULT_DOCS_ROOT = Path("docs")
LISTING_NAME = "index.html"


@dataclass
class BuildResult:
    entries: List[LatestEntry]
    skipped: List[SkippedRecord] = field(default_factory=list)
    manifest_path: Optional[Path] = None
    listing_path: Optional[Path] = None


def snapshot_order(snapshot: ArchivedSnapshot) -> Tuple[str, int, str]:
    """
    Total order used to pick the latest snapshot of a URL.

    A greater identifier base always wins; on an equal base the greater
    duplicate count wins; on a full tie the greater directory name wins.
    """
    base, duplicate = sort_key(snapshot.timestamp)
    return base, duplicate, snapshot.dir_name


def pick_latest_snapshots(snapshots: Iterable[ArchivedSnapshot]) -> Dict[str, ArchivedSnapshot]:
    """
    Select the most recent snapshot for every URL.

    Args:
        snapshots: Snapshots read from the archive

    Returns:
        Mapping of URL to its latest snapshot
    """
    latest_by_url: Dict[str, ArchivedSnapshot] = {}
    for snapshot in snapshots:
        existing = latest_by_url.get(snapshot.url)
        if existing is None or snapshot_order(snapshot) >= snapshot_order(existing):
            latest_by_url[snapshot.url] = snapshot
    return latest_by_url


class IndexBuilder:
    """
    Builds the latest view of an archive into a docs directory.
    """

    def __init__(self,
                 archive_root: os.PathLike,
                 docs_root: os.PathLike = DEFAULT_DOCS_ROOT,
                 tracker: Optional[ErrorTracker] = None):
        """
        Initialize the builder.

        Args:
            archive_root: Snapshot archive to read
            docs_root: Output root; ``latest/`` and ``index.html`` live here
            tracker: Records skipped archive entries (optional)
        """
        self.store = SnapshotStore(archive_root)
        self.docs_root = Path(docs_root)
        self.latest_root = self.docs_root / LATEST_DIR_NAME
        self.logger = logging.getLogger(__name__)
        self.tracker = tracker or ErrorTracker(self.logger)
        self.skipped: List[SkippedRecord] = []

    def _skip(self, record: SkippedRecord, url: str = None) -> None:
        self.skipped.append(record)
        self.tracker.log_warning(f"Skipping {record.location}: {record.reason}",
                                 context="build-index", url=url)

    def load_snapshots(self) -> List[ArchivedSnapshot]:
        """
        Read every usable snapshot directory in the archive.

        Directories with missing, unparsable or incomplete metadata are
        recorded as skipped and left out.
        """
        snapshots = []
        for dir_path in self.store.iter_snapshot_dirs():
            try:
                snapshots.append(self.store.read_snapshot(dir_path))
            except SkippedRecord as record:
                self._skip(record)
        self.logger.info(f"Loaded {len(snapshots)} snapshots from {self.store.archive_root}")
        return snapshots

    def ensure_clean_latest_dir(self) -> None:
        """Recreate an empty latest directory, creating the docs root if needed."""
        self.docs_root.mkdir(parents=True, exist_ok=True)
        if self.latest_root.exists():
            shutil.rmtree(self.latest_root)
        self.latest_root.mkdir(parents=True)

    def build_latest_artifacts(self, latest_by_url: Dict[str, ArchivedSnapshot]) -> List[LatestEntry]:
        """
        Copy each URL's latest snapshot into the latest directory.

        Args:
            latest_by_url: Mapping produced by ``pick_latest_snapshots``

        Returns:
            Manifest entries in URL order
        """
        entries: List[LatestEntry] = []
        slugs = SlugAllocator()

        for url in sorted(latest_by_url):
            snapshot = latest_by_url[url]
            slug = slugs.allocate_for_url(url)

            missing = snapshot.missing_files()
            if missing:
                self._skip(SkippedRecord(snapshot.dir_name, f"missing {', '.join(missing)}"), url=url)
                continue

            entry = LatestEntry.for_slug(url, slug, snapshot.timestamp)
            shutil.copyfile(snapshot.html_path, self.docs_root / entry.html)
            shutil.copyfile(snapshot.text_path, self.docs_root / entry.text)
            shutil.copyfile(snapshot.meta_path, self.docs_root / entry.meta)
            (self.docs_root / entry.meta_txt).write_text(
                render_metadata_text(snapshot.metadata), encoding='utf-8'
            )

            self.logger.debug(f"Latest for {url}: {snapshot.dir_name} -> {slug}")
            entries.append(entry)

        return entries

    def build(self) -> BuildResult:
        """
        Rebuild the latest view from scratch.

        Returns:
            BuildResult with entries, skipped records and output paths

        Raises:
            OSError: If the output cannot be written
        """
        self.skipped = []
        snapshots = self.load_snapshots()
        latest_by_url = pick_latest_snapshots(snapshots)

        self.ensure_clean_latest_dir()
        entries = self.build_latest_artifacts(latest_by_url)

        manifest_path = self.latest_root / DEFAULT_MANIFEST_NAME
        write_manifest(entries, manifest_path)

        listing_path = self.docs_root / LISTING_NAME
        write_listing(entries, listing_path)

        self.logger.info(
            f"Built latest view: {len(entries)} entries, {len(self.skipped)} skipped"
        )

        return BuildResult(
            entries=entries,
            skipped=list(self.skipped),
            manifest_path=manifest_path,
            listing_path=listing_path,
        )


def build_index(archive_root: os.PathLike,
                docs_root: os.PathLike = DEFAULT_DOCS_ROOT,
                tracker: Optional[ErrorTracker] = None) -> BuildResult:
    """
    Rebuild the latest view of ``archive_root`` into ``docs_root``.

    Args:
        archive_root: Snapshot archive to read
        docs_root: Output root
        tracker: Records skipped archive entries (optional)

    Returns:
        BuildResult describing the generated view
    """
    return IndexBuilder(archive_root, docs_root, tracker).build()
