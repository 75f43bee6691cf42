"""
File utility functions.
"""

from pathlib import Path


def read_text(path: str | Path) -> str:
    """Read a text file, dropping a leading UTF-8 byte order mark."""
    return Path(path).read_text(encoding="utf-8-sig")


def write_text(path: str | Path, content: str) -> Path:
    """Write text to file, creating parent directories if needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p
