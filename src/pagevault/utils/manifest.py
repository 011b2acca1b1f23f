"""
Manifest utilities for the derived "latest" view.
Stores a JSON array (docs/latest/index.json) with one entry per tracked URL,
ordered by URL.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, List

import yaml

from pagevault.utils.file_manager import dump_json


DEFAULT_MANIFEST_NAME = "index.json"
LATEST_DIR_NAME = "latest"


@dataclass
class LatestEntry:
    url: str
    slug: str
    timestamp: str
    html: str       # paths relative to the docs root
    text: str
    meta: str
    meta_txt: str

    @classmethod
    def for_slug(cls, url: str, slug: str, timestamp: str) -> "LatestEntry":
        prefix = f"{LATEST_DIR_NAME}/{slug}"
        return cls(
            url=url,
            slug=slug,
            timestamp=timestamp,
            html=f"{prefix}.html",
            text=f"{prefix}.txt",
            meta=f"{prefix}.meta.json",
            meta_txt=f"{prefix}.meta.txt",
        )


def write_manifest(entries: List[LatestEntry], path: os.PathLike) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(dump_json([asdict(entry) for entry in entries]))


def render_metadata_text(metadata: Dict[str, Any]) -> str:
    """
    Render snapshot metadata as YAML for quick reading.

    Keys keep their original order and long values are not folded.
    The result always ends with a newline.
    """
    text = yaml.safe_dump(
        metadata,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
    return text if text.endswith("\n") else text + "\n"
