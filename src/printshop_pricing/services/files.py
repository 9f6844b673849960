"""
File helpers shared by the file-backed stores.
"""
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional


@contextmanager
def replace_file(path: Path, newline: Optional[str] = None):
    """
    Open a private temp file next to path for writing.

    When the block finishes the temp file is renamed over path, so readers
    see either the old contents or the new ones. On error the temp file is
    removed and path is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline=newline) as f:
            yield f
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
