# paths.py
import mimetypes
import posixpath
from typing import Optional, Union

DIRECTORY_MIMETYPE = "inode/directory"
DEFAULT_MIMETYPE = "application/octet-stream"


def normalize(path: str) -> str:
    """Turns a virtual path into its canonical form: no surrounding slashes, '' for the root."""
    if path == ".":
        return ""
    return (path or "").strip("/")


def dirname(path: str) -> str:
    """Directory component of a virtual path, '' when the path sits at the root."""
    parent = posixpath.dirname(normalize(path))
    return "" if parent in (".", "/") else parent


def basename(path: str) -> str:
    return posixpath.basename(normalize(path))


def join(base: str, name: str) -> str:
    return normalize(f"{normalize(base)}/{name}")


def apply_prefix(prefix: str, path: str) -> str:
    """Builds the absolute ShareFile path for a virtual path under the root prefix."""
    return "/" + f"{normalize(prefix)}/{normalize(path)}".strip("/")


def split_extension(name: str):
    """
    Splits a file name into (stem, extension):
    the extension is whatever follows the last dot, so ".env" has an empty stem.
    """
    stem, dot, extension = name.rpartition(".")
    if not dot:
        return name, ""
    return stem, extension


def guess_mimetype(name: str, contents: Optional[Union[bytes, str]] = None) -> str:
    mimetype, _ = mimetypes.guess_type(name)
    if mimetype:
        return mimetype
    if contents is None:
        return DEFAULT_MIMETYPE
    if isinstance(contents, str):
        return "text/plain"
    try:
        contents.decode("utf-8")
        return "text/plain"
    except UnicodeDecodeError:
        return DEFAULT_MIMETYPE
