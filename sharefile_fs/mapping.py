# mapping.py
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from . import paths
from .storage.dto import FileMetadata, RemoteItem

_FRACTION = re.compile(r"\.(\d+)")


def _parse_timestamp(value: Optional[str]) -> Optional[int]:
    """Converts a ShareFile date string (ISO 8601, usually with a 'Z' suffix) to a unix timestamp."""
    if not value:
        return None
    try:
        # fromisoformat before 3.11 only accepts 3 or 6 fractional digits.
        normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip(), count=1)
        parsed = datetime.fromisoformat(normalized.replace("Z", "+00:00"))
    except ValueError:
        logging.warning(f"Unparseable ShareFile date: '{value}'")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def item_timestamp(item: RemoteItem) -> Optional[int]:
    value = (
        item.client_modified_date
        or item.client_created_date
        or item.creation_date
        or item.progeny_edit_date
    )
    return _parse_timestamp(value)


def map_item_info(
    item: RemoteItem,
    path: str = "",
    contents=None,
    stream=None,
    include_item: bool = False,
) -> FileMetadata:
    """
    Maps a ShareFile item to a FileMetadata DTO.

    :param item: The ShareFile item.
    :param path: Base path (the directory the item lives in).
    :param contents: Contents of the file, if already downloaded.
    :param stream: Open read handle of the file, if any.
    :param include_item: Attach the raw ShareFile record to the result.
    """
    item_path = paths.join(path, item.file_name)

    if item.is_file:
        mimetype = paths.guess_mimetype(item.file_name, contents)
        item_type = "file"
    else:
        mimetype = paths.DIRECTORY_MIMETYPE
        item_type = "dir"

    stem, extension = paths.split_extension(item.file_name)

    return FileMetadata(
        timestamp=item_timestamp(item),
        path=item_path,
        mimetype=mimetype,
        dirname=paths.dirname(item_path),
        extension=extension,
        filename=stem,
        basename=stem,
        type=item_type,
        size=item.size_bytes,
        contents=contents if contents else None,
        stream=stream if stream else None,
        sharefile_item=item.raw if include_item else None,
    )


def map_item_list(items: Iterable[RemoteItem], path: str, include_item: bool = False) -> List[FileMetadata]:
    return [map_item_info(item, path, include_item=include_item) for item in items]


def _files_and_folders(children) -> List[RemoteItem]:
    items = [RemoteItem.from_api(child) for child in children or []]
    return [item for item in items if item.is_file or item.is_folder]


def build_item_list(
    client,
    item: RemoteItem,
    path: str,
    recursive: bool = False,
    include_item: bool = False,
) -> List[FileMetadata]:
    """
    Builds the metadata list for the children of a ShareFile folder.

    Each folder contributes its mapped children first, followed by the
    subtrees of those children in the order the API returned them. Folders
    are walked with an explicit stack so deep trees do not hit the
    recursion limit.
    """
    item_list: List[FileMetadata] = []
    pending = [(item, paths.normalize(path))]

    while pending:
        folder, folder_path = pending.pop()
        if folder.is_file:
            continue

        logging.debug(f"Listing children of item '{folder.id}' at '{folder_path}'")
        expanded = RemoteItem.from_api(client.get_item_by_id(folder.id, True) or {})
        children = _files_and_folders(expanded.children)
        if not children:
            continue

        item_list.extend(map_item_list(children, folder_path, include_item))

        if recursive:
            # Reversed so the first child is popped, and fully walked, first.
            for child in reversed(children):
                pending.append((child, paths.join(folder_path, child.file_name)))

    return item_list
