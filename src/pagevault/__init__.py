"""
pagevault: Rendered Page Snapshots & Latest-View Index

A utility for periodically capturing rendered web pages (HTML, readable text
and metadata) into an append-only, timestamped archive, and rebuilding a
static "latest" view that maps every tracked URL to its most recent snapshot.
"""

__version__ = "1.0.0"
__author__ = "pagevault Project"
__description__ = "Rendered Page Snapshots & Latest-View Index"
