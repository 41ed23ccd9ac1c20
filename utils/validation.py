"""Path checks for the command-line front end."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union
from urllib.parse import urlparse


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL.

    One-letter schemes are Windows drive letters, not URLs.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def _normalise_exts(exts: Iterable[str]) -> set[str]:
    return {("." + ext.lower().lstrip(".")) for ext in exts}


def validate_image_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Return the resolved input *path* or raise ``ValueError``.

    The file must exist, must carry one of *allowed_exts* (with or without
    the leading dot) and must not be a URL.
    """
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser()
    try:
        p = p.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path_str}") from exc

    if not p.is_file():
        raise ValueError(f"Not a file: {path_str}")

    if p.suffix.lower() not in _normalise_exts(allowed_exts):
        raise ValueError(f"Unsupported file extension: {p.suffix}")

    return p


def validate_output_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Return the resolved output *path* or raise ``ValueError``.

    The parent directory has to exist already; nothing is created here.
    """
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser().resolve()

    if not p.parent.is_dir():
        raise ValueError(f"Directory does not exist: {p.parent}")

    if p.is_dir():
        raise ValueError(f"Output path is a directory: {path_str}")

    if p.suffix.lower() not in _normalise_exts(allowed_exts):
        raise ValueError(f"Unsupported file extension: {p.suffix}")

    return p
