"""
Slug generation for derived artifact filenames.
"""

import re
from typing import Optional, Set


MAX_SLUG_LENGTH = 100
FALLBACK_SLUG = "snapshot"


def slugify_url(url: str) -> str:
    """
    Generate a filesystem-safe, readable name from a URL.

    Args:
        url: Source URL

    Returns:
        Slug of at most 100 characters (may be empty)
    """
    slug = re.sub(r'^https?://', '', url, flags=re.IGNORECASE)
    slug = slug.lower()
    slug = re.sub(r'[^a-z0-9]+', '-', slug)
    slug = slug.strip('-')
    return slug[:MAX_SLUG_LENGTH]


class SlugAllocator:
    """
    Hands out slugs that are unique within one index build.

    Collisions get ``-2``, ``-3``, ... appended; the base is shortened so the
    result stays within the length limit.
    """

    def __init__(self, max_length: int = MAX_SLUG_LENGTH):
        self.max_length = max_length
        self.used: Set[str] = set()

    def allocate(self, base_slug: Optional[str]) -> str:
        base = base_slug or FALLBACK_SLUG
        candidate = base[:self.max_length]
        counter = 2
        while candidate in self.used:
            suffix = f"-{counter}"
            candidate = base[:self.max_length - len(suffix)] + suffix
            counter += 1
        self.used.add(candidate)
        return candidate

    def allocate_for_url(self, url: str) -> str:
        return self.allocate(slugify_url(url))
