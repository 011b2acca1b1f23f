"""
Static listing page for the latest view (docs/index.html).

The page is a pure function of the manifest entries: it carries no
generation time, so rebuilding an unchanged archive gives identical bytes.
"""

import os
from typing import List

from pagevault.utils.manifest import LatestEntry


EMPTY_PLACEHOLDER = "No snapshots yet."

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Snapshot index</title>
    <style>
      body {{ font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif; font-size: 14px; line-height: 1.5; max-width: 960px; margin: 2rem auto; padding: 0 1rem; }}
      h1 {{ font-size: 20px; }}
      table {{ border-collapse: collapse; width: 100%; margin-top: 1rem; }}
      th, td {{ border: 1px solid #ccc; padding: 6px 8px; text-align: left; font-size: 13px; }}
      th {{ background-color: #f5f5f5; }}
      code {{ font-family: "SFMono-Regular", Consolas, "Liberation Mono", Menlo, monospace; }}
      p {{ margin: 0.5rem 0 1rem; }}
    </style>
  </head>
  <body>
    <h1>Latest URL snapshots</h1>
    <p>This list is generated from the snapshot archive. Each link points to the most recent capture of that URL. Older captures remain under <code>archive/</code>.</p>
    <table>
      <thead>
        <tr>
          <th>Source URL</th>
          <th>Latest timestamp</th>
          <th>Snapshot HTML</th>
          <th>Snapshot text</th>
          <th>Snapshot meta</th>
          <th>Snapshot meta (YAML)</th>
        </tr>
      </thead>
      <tbody>
        {rows}
      </tbody>
    </table>
  </body>
</html>
"""

_ROW_TEMPLATE = """<tr>
          <td><a href="{url}">{url}</a></td>
          <td><code>{timestamp}</code></td>
          <td><a href="{html}">Snapshot HTML</a></td>
          <td><a href="{text}">Snapshot text</a></td>
          <td><a href="{meta}">Snapshot meta</a></td>
          <td><a href="{meta_txt}">Snapshot meta (YAML)</a></td>
        </tr>"""


def escape_html(text: str) -> str:
    """Escape HTML characters."""
    if not isinstance(text, str):
        text = str(text)
    return (text.replace('&', '&amp;')
               .replace('<', '&lt;')
               .replace('>', '&gt;')
               .replace('"', '&quot;')
               .replace("'", '&#x27;'))


def build_listing_html(entries: List[LatestEntry]) -> str:
    """Build the HTML content for the listing page."""
    if not entries:
        rows = f'<tr><td colspan="6">{EMPTY_PLACEHOLDER}</td></tr>'
    else:
        rows = "\n        ".join(
            _ROW_TEMPLATE.format(
                url=escape_html(entry.url),
                timestamp=escape_html(entry.timestamp),
                html=escape_html(entry.html),
                text=escape_html(entry.text),
                meta=escape_html(entry.meta),
                meta_txt=escape_html(entry.meta_txt),
            )
            for entry in entries
        )
    return _PAGE_TEMPLATE.format(rows=rows)


def write_listing(entries: List[LatestEntry], output_path: os.PathLike) -> str:
    """
    Write the listing page.

    Args:
        entries: Manifest entries in display order
        output_path: Target HTML path

    Returns:
        Path to the written file
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(build_listing_html(entries))
    return str(output_path)
