"""
File output for gitlogjson.

Writes the serialized changelog with:
- Atomic writes (write to temp, then rename)
- Automatic parent directory creation
- UTF-8 output with a trailing newline

A failed run therefore never truncates or half-writes an existing
changelog file.
"""

import os
import sys
import tempfile
import logging
from pathlib import Path

from ..exit_codes import PersistError

logger = logging.getLogger(__name__)

STDOUT = "-"


class JsonFileWriter:
    """
    Persists a finished JSON document.

    Example:
        writer = JsonFileWriter()
        writer.write('{"v1.0.0": []}', "changelog.json")
    """

    def write(self, document: str, dest: str) -> None:
        """
        Write a document to `dest`, or to stdout when dest is "-".

        Raises:
            PersistError: if the file cannot be written
        """
        if dest == STDOUT:
            sys.stdout.write(document + '\n')
            sys.stdout.flush()
            return

        path = Path(dest).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(path, document)
        except OSError as e:
            raise PersistError(str(path), str(e)) from e

        logger.info(f"Changelog written to {path}")

    def _write_atomic(self, path: Path, document: str) -> None:
        """Write data atomically using temp file and rename."""
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(document)
                f.write('\n')  # Trailing newline

            # Atomic rename
            os.replace(temp_path, path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
