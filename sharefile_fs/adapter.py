# adapter.py
import io
import logging
from typing import List, Optional, Union

from . import paths
from .access import AccessGuard, Capability
from .exceptions import (
    AccessDenied,
    ItemNotFound,
    PostConditionFailed,
    UnableToCopyFile,
    UnableToCreateDirectory,
    UnableToDeleteDirectory,
    UnableToDeleteFile,
    UnableToMoveFile,
    UnableToReadFile,
    UnableToRetrieveMetadata,
    UnableToWriteFile,
)
from .mapping import build_item_list, map_item_info
from .resolver import PathResolver
from .storage.base import FilesystemAdapter
from .storage.dto import FileMetadata, RemoteItem
from .streams import RemoteStream


class SharefileAdapter(FilesystemAdapter):
    """
    Virtual filesystem on top of the ShareFile item API.

    Every operation resolves its paths from scratch, checks the ShareFile
    capability flags it needs and then calls the API. Operations with a
    boolean/optional result (``rename``, ``has``, ``create_dir``, ``put`` ...)
    never raise; the others raise a FilesystemError subclass that names the
    path(s) involved and chains the original cause.
    """

    def __init__(
        self,
        client,
        prefix: str = "",
        return_sharefile_item: bool = False,
        stream_timeout: Optional[float] = None,
    ):
        """
        :param client: ShareFile API client (see ShareFileClient).
        :param prefix: Folder acting as the root of the virtual filesystem.
        :param return_sharefile_item: Attach the raw ShareFile item to returned metadata.
        :param stream_timeout: Timeout for opening download streams, in seconds.
        """
        self.client = client
        self.return_sharefile_item = return_sharefile_item
        self.stream_timeout = stream_timeout
        self.resolver = PathResolver(client)
        self.guard = AccessGuard(client)
        self.set_path_prefix(prefix)

    def set_path_prefix(self, prefix: str) -> None:
        """Sets the folder that acts as root directory for all files and folders."""
        self.path_prefix = paths.normalize(prefix)
        self.resolver.prefix = self.path_prefix

    def get_client(self):
        return self.client

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self, path: str) -> Union[bytes, str]:
        metadata = self.read_with_meta(path)
        return metadata.contents if metadata.contents is not None else b""

    def read_with_meta(self, path: str) -> FileMetadata:
        """Downloads a file and returns its metadata with ``contents`` filled in."""
        try:
            logging.info(f"Reading '{path}'...")
            item = self._require_item(path)
            self._require_access(item, Capability.CAN_DOWNLOAD)
            contents = self.client.get_item_contents(item.id)
            return self._map_item(item, paths.dirname(path), contents=contents)
        except Exception as e:
            logging.error(f"Failed to read '{path}': {e}")
            raise UnableToReadFile.from_location(path, previous=e) from e

    def read_stream(self, path: str) -> RemoteStream:
        """
        Opens a streaming read handle for a file. The caller is responsible
        for closing the returned RemoteStream.
        """
        return self.read_stream_with_meta(path).stream

    def read_stream_with_meta(self, path: str) -> FileMetadata:
        try:
            logging.info(f"Opening stream for '{path}'...")
            item = self._require_item(path)
            self._require_access(item, Capability.CAN_DOWNLOAD)
            url = self.client.get_item_download_url(item.id)
            stream = RemoteStream.open(url["DownloadUrl"], timeout=self.stream_timeout)
            return self._map_item(item, paths.dirname(path), stream=stream)
        except Exception as e:
            logging.error(f"Failed to open stream for '{path}': {e}")
            raise UnableToReadFile.from_location(path, previous=e) from e

    def list_contents(self, directory: str = "", recursive: bool = False) -> List[FileMetadata]:
        item = self._get_item_by_path(directory)
        if item is None:
            logging.info(f"Directory '{directory}' does not exist; nothing to list.")
            return []

        return build_item_list(
            self.client, item, directory, recursive, self.return_sharefile_item
        )

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def get_metadata(self, path: str) -> Optional[FileMetadata]:
        item = self._get_item_by_path(path)
        if item is None:
            return None

        metadata = self._map_item(item, paths.dirname(path))
        if paths.normalize(path) == "":
            metadata.path = path
        return metadata

    def has(self, path: str) -> Optional[FileMetadata]:
        return self.get_metadata(path)

    def get_size(self, path: str) -> Optional[FileMetadata]:
        return self.get_metadata(path)

    def get_mimetype(self, path: str) -> Optional[FileMetadata]:
        return self.get_metadata(path)

    def get_timestamp(self, path: str) -> Optional[FileMetadata]:
        return self.get_metadata(path)

    def file_exists(self, path: str) -> bool:
        return self.has(path) is not None

    def directory_exists(self, path: str) -> bool:
        return self.has(path) is not None

    def mime_type(self, path: str) -> FileMetadata:
        metadata = self.get_metadata(path)
        if metadata is None:
            raise UnableToRetrieveMetadata.mime_type(path, "Item could not be found.")
        return metadata

    def file_size(self, path: str) -> FileMetadata:
        metadata = self.get_metadata(path)
        if metadata is None:
            raise UnableToRetrieveMetadata.file_size(path, "Item could not be found.")
        return metadata

    def last_modified(self, path: str) -> FileMetadata:
        metadata = self.get_metadata(path)
        if metadata is None:
            raise UnableToRetrieveMetadata.last_modified(path, "Item could not be found.")
        return metadata

    def visibility(self, path: str) -> FileMetadata:
        raise UnableToRetrieveMetadata.visibility(
            path, f"{type(self).__name__} does not support visibility. Path: {path}"
        )

    def set_visibility(self, path: str, visibility: str) -> None:
        raise UnableToRetrieveMetadata.visibility(
            path, f"{type(self).__name__} does not support visibility. Path: {path}"
        )

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, path: str, contents: Union[bytes, str], config=None) -> None:
        try:
            self._upload_file(path, contents, overwrite=True)
        except Exception as e:
            logging.error(f"Failed to write '{path}': {e}")
            raise UnableToWriteFile.at_location(path, previous=e) from e

    def write_stream(self, path: str, resource, config=None) -> None:
        try:
            self._upload_file(path, resource, overwrite=True)
        except Exception as e:
            logging.error(f"Failed to write stream to '{path}': {e}")
            raise UnableToWriteFile.at_location(path, previous=e) from e

    def put(self, path: str, contents) -> Optional[FileMetadata]:
        return self._upload_or_none(path, contents)

    def update(self, path: str, contents, config=None) -> Optional[FileMetadata]:
        return self._upload_or_none(path, contents)

    def update_stream(self, path: str, resource, config=None) -> Optional[FileMetadata]:
        return self._upload_or_none(path, resource)

    def rename(self, path: str, newpath: str) -> bool:
        """
        Renames and/or moves an item with a single update call.
        Returns False when any check fails or the item is not found at
        ``newpath`` afterwards.
        """
        try:
            target_folder = self._get_item_by_path(paths.dirname(newpath))
            if target_folder is None:
                return False
            if not self.guard.authorized(target_folder, Capability.CAN_UPLOAD):
                return False
            item = self._get_item_by_path(path)
            if item is None:
                return False

            name = paths.basename(newpath)
            self.client.update_item(
                item.id,
                {"FileName": name, "Name": name, "Parent": {"Id": target_folder.id}},
            )
            return self.has(newpath) is not None
        except Exception as e:
            logging.warning(f"Failed to rename '{path}' to '{newpath}': {e}")
            return False

    def copy(self, source: str, destination: str, config=None) -> None:
        """
        Copies a file. ShareFile can only copy an item into another folder
        under its own name, so any other copy downloads the source and
        uploads it again under the new name.
        """
        try:
            target_folder = self._get_item_by_path(paths.dirname(destination))
            if target_folder is None:
                raise ItemNotFound(
                    f"The file could not be copied because the destination, {destination}, does not exist."
                )
            if not self.guard.authorized(target_folder, Capability.CAN_UPLOAD):
                raise AccessDenied(
                    f"The file could not be copied because the user does not have access to the target folder, {destination}."
                )
            item = self._get_item_by_path(source)
            if item is None:
                raise ItemNotFound(
                    f"The file could not be copied because the source file, at {source}, does not exist."
                )

            if self._can_copy_natively(source, destination):
                logging.info(f"Copying '{source}' to '{destination}' with ShareFile copy...")
                self.client.copy_item(target_folder.id, item.id, True)
            else:
                logging.info(f"Copying '{source}' to '{destination}' by re-uploading...")
                contents = self.client.get_item_contents(item.id)
                self._upload_file(destination, contents, overwrite=True)
        except Exception as e:
            logging.error(f"Failed to copy '{source}' to '{destination}': {e}")
            raise UnableToCopyFile.from_location_to(source, destination, e) from e

    def move(self, source: str, destination: str, config=None) -> None:
        """
        Copies the file, then deletes the source. A failed delete still fails
        the move; the copy is left in place.

        ShareFile names are case-insensitive, so a destination that differs
        from the source only in case is the same item: an identical path is
        a no-op and a case-only change is a rename.
        """
        try:
            if paths.normalize(source).lower() == paths.normalize(destination).lower():
                self._move_onto_itself(source, destination)
                return
            self.copy(source, destination, config)
            self._delete_item(source, UnableToDeleteFile)
        except Exception as e:
            logging.error(f"Failed to move '{source}' to '{destination}': {e}")
            raise UnableToMoveFile.from_location_to(source, destination, e) from e

    def create_directory(self, path: str, config=None) -> None:
        try:
            self._create_folder(path)
        except Exception as e:
            logging.error(f"Failed to create directory '{path}': {e}")
            raise UnableToCreateDirectory.at_location(path, previous=e) from e

    def create_dir(self, dirname: str) -> Optional[FileMetadata]:
        try:
            return self._create_folder(dirname)
        except Exception as e:
            logging.warning(f"Failed to create directory '{dirname}': {e}")
            return None

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def delete(self, path: str) -> None:
        self._delete_item(path, UnableToDeleteFile)

    def delete_directory(self, path: str) -> None:
        self._delete_item(path, UnableToDeleteDirectory)

    def read_and_delete(self, path: str) -> Optional[Union[bytes, str]]:
        try:
            item = self._get_item_by_path(path)
            if item is None:
                return None
            if not (
                self.guard.authorized(item, Capability.CAN_DOWNLOAD)
                and self.guard.authorized(item, Capability.CAN_DELETE_CURRENT_ITEM)
            ):
                return None

            contents = self.client.get_item_contents(item.id)
            self.delete(path)
            return contents
        except Exception as e:
            logging.warning(f"Failed to read and delete '{path}': {e}")
            return None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_item_by_path(self, path: str) -> Optional[RemoteItem]:
        return self.resolver.resolve(path)

    def _require_item(self, path: str) -> RemoteItem:
        item = self._get_item_by_path(path)
        if item is None:
            raise ItemNotFound("Item could not be found.")
        return item

    def _require_access(self, item: RemoteItem, capability: Capability, message: str = "Access forbidden.") -> None:
        if not self.guard.authorized(item, capability):
            raise AccessDenied(message)

    def _map_item(self, item: RemoteItem, path: str, contents=None, stream=None) -> FileMetadata:
        return map_item_info(
            item,
            path,
            contents=contents,
            stream=stream,
            include_item=self.return_sharefile_item,
        )

    @staticmethod
    def _can_copy_natively(source: str, destination: str) -> bool:
        # Native copy keeps the item name, so it only applies across folders.
        return (
            paths.dirname(source).lower() != paths.dirname(destination).lower()
            and paths.basename(source).lower() == paths.basename(destination).lower()
        )

    def _move_onto_itself(self, source: str, destination: str) -> None:
        self._require_item(source)
        if paths.normalize(source) == paths.normalize(destination):
            logging.info(f"'{source}' and '{destination}' are the same item; nothing to move.")
            return
        if not self.rename(source, destination):
            raise PostConditionFailed(f"The file could not be renamed to {destination}.")

    def _upload_file(self, path: str, contents, overwrite: bool = True) -> FileMetadata:
        """
        Uploads bytes, text or a readable stream to ``path``.

        :return: Metadata of the uploaded file; ``contents`` is set when
            bytes or text were given.
        """
        parent_folder = self._get_item_by_path(paths.dirname(path))
        if parent_folder is None:
            raise ItemNotFound(f"The parent folder of {path} does not exist.")
        self._require_access(
            parent_folder,
            Capability.CAN_UPLOAD,
            f"You do not have permission to upload to the parent folder of {path}.",
        )

        if isinstance(contents, str):
            stream = io.BytesIO(contents.encode("utf-8"))
        elif isinstance(contents, (bytes, bytearray)):
            stream = io.BytesIO(contents)
        else:
            stream = contents

        self.client.upload_file_streamed(
            stream, parent_folder.id, paths.basename(path), False, overwrite
        )

        metadata = self.get_metadata(path)
        if metadata is None:
            raise PostConditionFailed(f"The file {path} could not be found after uploading.")
        if isinstance(contents, (bytes, str)):
            metadata.contents = contents
        return metadata

    def _upload_or_none(self, path: str, contents) -> Optional[FileMetadata]:
        try:
            return self._upload_file(path, contents, overwrite=True)
        except Exception as e:
            logging.warning(f"Failed to upload '{path}': {e}")
            return None

    def _create_folder(self, path: str) -> FileMetadata:
        parent_folder = self._get_item_by_path(paths.dirname(path))
        if parent_folder is None:
            raise ItemNotFound(f"The parent folder of {path} does not exist.")
        self._require_access(
            parent_folder,
            Capability.CAN_ADD_FOLDER,
            "You do not have permission to create this directory.",
        )

        name = paths.basename(path)
        self.client.create_folder(parent_folder.id, name, name, True)

        metadata = self.get_metadata(path)
        if metadata is None:
            raise PostConditionFailed("The directory could not be created.")
        return metadata

    def _delete_item(self, path: str, error_class) -> None:
        """Files and directories are deleted the same way, so this handles both."""
        try:
            item = self._require_item(path)
            self._require_access(
                item,
                Capability.CAN_DELETE_CURRENT_ITEM,
                "You do not have permission to delete this item.",
            )
            self.client.delete_item(item.id)
            if self.has(path) is not None:
                raise PostConditionFailed("The item still exists after deleting it.")
            logging.info(f"Deleted '{path}'.")
        except Exception as e:
            logging.error(f"Failed to delete '{path}': {e}")
            raise error_class.at_location(path, previous=e) from e
