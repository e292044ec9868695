# storage/base.py
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Union

from .dto import FileMetadata


class FilesystemAdapter(ABC):
    """
    Abstract base class for a virtual filesystem backed by remote storage.
    Defines the path-based interface that generic file-storage code relies on;
    concrete adapters translate it to a specific storage API.
    """

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """
        Checks whether an item exists at the given path.

        :param path: Virtual path of the file.
        """
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """
        Checks whether an item exists at the given directory path.

        :param path: Virtual path of the directory.
        """
        pass

    @abstractmethod
    def read(self, path: str) -> Union[bytes, str]:
        """
        Reads the full contents of a file.

        :param path: Virtual path of the file.
        :return: The file contents.
        """
        pass

    @abstractmethod
    def read_stream(self, path: str):
        """
        Opens a streaming read handle for a file. The caller owns the handle
        and must close it.

        :param path: Virtual path of the file.
        """
        pass

    @abstractmethod
    def list_contents(self, directory: str = "", recursive: bool = False) -> List[FileMetadata]:
        """
        Lists the contents of a directory.

        :param directory: Virtual path of the directory.
        :param recursive: Descend into subdirectories.
        :return: A list of standardized FileMetadata DTOs.
        """
        pass

    @abstractmethod
    def write(self, path: str, contents: Union[bytes, str], config=None) -> None:
        """
        Writes contents to a file, overwriting it when it exists.

        :param path: Virtual path of the file.
        :param contents: Bytes or text to write.
        """
        pass

    @abstractmethod
    def write_stream(self, path: str, resource: BinaryIO, config=None) -> None:
        """
        Writes the contents of a readable stream to a file.

        :param path: Virtual path of the file.
        :param resource: A binary file-like object.
        """
        pass

    @abstractmethod
    def copy(self, source: str, destination: str, config=None) -> None:
        """
        Copies a file.

        :param source: Virtual path of the existing file.
        :param destination: Virtual path of the copy.
        """
        pass

    @abstractmethod
    def move(self, source: str, destination: str, config=None) -> None:
        """
        Moves a file.

        :param source: Virtual path of the existing file.
        :param destination: Virtual path to move it to.
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Deletes a file.

        :param path: Virtual path of the file.
        """
        pass

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """
        Deletes a directory and everything below it.

        :param path: Virtual path of the directory.
        """
        pass

    @abstractmethod
    def create_directory(self, path: str, config=None) -> None:
        """
        Creates a directory.

        :param path: Virtual path of the new directory.
        """
        pass

    @abstractmethod
    def visibility(self, path: str) -> FileMetadata:
        pass

    @abstractmethod
    def set_visibility(self, path: str, visibility: str) -> None:
        pass

    @abstractmethod
    def mime_type(self, path: str) -> FileMetadata:
        pass

    @abstractmethod
    def file_size(self, path: str) -> FileMetadata:
        pass

    @abstractmethod
    def last_modified(self, path: str) -> FileMetadata:
        pass
