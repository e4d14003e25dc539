# utils.py
import re
from pathlib import Path

from loguru import logger

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    """
    Reduce an uploaded filename to something safe to use as a path component.
    """
    base = Path(name or "").name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "document"


def save_bytes(data: bytes, path):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "wb") as f:
        f.write(data)
    return p


def remove_file(path) -> bool:
    p = Path(path)
    if not p.exists():
        return False
    try:
        p.unlink()
    except OSError as e:
        logger.warning(f"[Files] Could not remove {p}: {e}")
        return False
    return True
