"""
Utility functions for atomic file writes.

Registry exports and generated reports are never left half-written:
content goes to a temporary file in the target directory and is moved
into place once complete.
"""

import os
import shutil
import tempfile
from pathlib import Path


def atomic_write_text(
    content: str, output_file: str | Path, suffix: str = ".tmp", newline: str | None = None
) -> None:
    """
    Write text to a file atomically. An existing target keeps its permission bits.

    Args:
        content: Text to write (UTF-8)
        output_file: Target file path; parent directories are created
        suffix: Suffix for the temporary file
        newline: Passed to open(); "" writes line endings exactly as given
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(suffix=suffix, dir=output_path.parent, text=True)

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8", newline=newline) as f:
            f.write(content)

        if output_path.exists():
            shutil.copymode(output_path, temp_path)
        shutil.move(temp_path, output_path)

    except Exception:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
