"""Prompt text for categorization requests."""

from __future__ import annotations

import json
import textwrap
from typing import Any, Sequence

SYSTEM_PROMPT = "You are a helpful assistant that outputs raw JSON."

_INSTRUCTIONS = textwrap.dedent(
    """\
    Item format:
    - Files: {"name": "filename.ext", "type": "file"}
    - Folders: {"name": "foldername", "type": "folder", "context": {...}}
      - context.fileCount: number of files found inside the folder
      - context.topExtensions: most common file extensions inside
      - context.markers: project markers such as package.json (Node.js),
        Cargo.toml (Rust), pyproject.toml (Python) or .git
      - context.truncated: true when the folder was too large to inspect fully

    YOUR TASK:
    1. Identify existing category folders. These are folders that already act as
       organization buckets (for example "Images", "Documents", "Archives"):
       - they have a descriptive name suggesting a category
       - they contain files (fileCount > 0)
       - they have no project markers
    2. Identify the items that need organizing:
       - loose files in the root
       - project folders (folders with markers like package.json, .git, Cargo.toml)
       - folders with random or non-descriptive names
    3. Build an organization plan:
       - reuse existing category folder names when they fit (if "Images" exists,
         use "Images", not "Pictures")
       - group project folders under "Projects" or by ecosystem
         ("Node.js Projects", "Python Projects")
       - only create a new category when no existing folder fits
       - put truly miscellaneous items in "Misc"
    4. Never organize category folders:
       - do NOT list an existing category folder as an item to move
       - if the folder only contains category folders and no loose items,
         it is already organized: return an empty plan {}

    RESPONSE FORMAT - return ONLY valid JSON, without markdown fences:
    {
      "Category Name": {
        "reason": "Short explanation",
        "items": [{"name": "item1.txt", "type": "file"}, {"name": "MyProject", "type": "folder"}]
      }
    }

    If everything is already organized, return: {}"""
)


def build_user_prompt(
    items: Sequence[dict[str, Any]],
    history: Sequence[dict[str, Any]] = (),
) -> str:
    """Compose the user prompt for one categorization request.

    Args:
        items: Listing entries in prompt form (``name``, ``type``, ``context``).
        history: Recent move records in prompt form, newest first.

    Returns:
        str: Prompt text.
    """
    sections = [
        "You are an intelligent file and folder organizer. "
        "Analyze and categorize the following items.",
        "ITEMS IN FOLDER:\n" + json.dumps(list(items), indent=2, ensure_ascii=False),
        _INSTRUCTIONS,
    ]
    if history:
        sections.append(
            "Previous organization history (user preferences):\n"
            + json.dumps(list(history), ensure_ascii=False)
        )
    return "\n\n".join(sections)


__all__ = ["SYSTEM_PROMPT", "build_user_prompt"]
