# exceptions.py
from typing import Optional


class ShareFileFsError(Exception):
    """Base class for the internal failure kinds raised inside the adapter."""
    pass


class ItemNotFound(ShareFileFsError):
    """A path does not resolve to a ShareFile item."""
    pass


class AccessDenied(ShareFileFsError):
    """A capability flag required by the operation is false or missing."""
    pass


class RemoteCallFailed(ShareFileFsError):
    """The ShareFile API (or the transport underneath it) returned an error."""
    pass


class PostConditionFailed(ShareFileFsError):
    """The remote call succeeded but the confirmation check contradicts it."""
    pass


class FilesystemError(Exception):
    """
    Base class for the verb-specific failures surfaced to callers.
    The original cause is always chained via ``raise ... from``.
    """

    def __init__(self, message: str, reason: str = ""):
        self.reason = reason
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)


def _reason_of(previous: Optional[BaseException], reason: str = "") -> str:
    if reason:
        return reason
    return str(previous) if previous is not None else ""


class UnableToReadFile(FilesystemError):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        super().__init__(f"Unable to read file from location: {location}", reason)

    @classmethod
    def from_location(cls, location: str, reason: str = "", previous=None):
        return cls(location, _reason_of(previous, reason))


class UnableToWriteFile(FilesystemError):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        super().__init__(f"Unable to write file at location: {location}", reason)

    @classmethod
    def at_location(cls, location: str, reason: str = "", previous=None):
        return cls(location, _reason_of(previous, reason))


class UnableToCreateDirectory(UnableToWriteFile):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        FilesystemError.__init__(self, f"Unable to create a directory at {location}", reason)


class UnableToCopyFile(FilesystemError):
    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(f"Unable to copy file from {source} to {destination}", reason)

    @classmethod
    def from_location_to(cls, source: str, destination: str, previous=None):
        return cls(source, destination, _reason_of(previous))


class UnableToMoveFile(FilesystemError):
    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(f"Unable to move file from {source} to {destination}", reason)

    @classmethod
    def from_location_to(cls, source: str, destination: str, previous=None):
        return cls(source, destination, _reason_of(previous))


class UnableToDeleteFile(FilesystemError):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        super().__init__(f"Unable to delete file located at: {location}", reason)

    @classmethod
    def at_location(cls, location: str, reason: str = "", previous=None):
        return cls(location, _reason_of(previous, reason))


class UnableToDeleteDirectory(FilesystemError):
    def __init__(self, location: str, reason: str = ""):
        self.location = location
        super().__init__(f"Unable to delete directory located at: {location}", reason)

    @classmethod
    def at_location(cls, location: str, reason: str = "", previous=None):
        return cls(location, _reason_of(previous, reason))


class UnableToRetrieveMetadata(FilesystemError):
    def __init__(self, location: str, metadata_type: str, reason: str = ""):
        self.location = location
        self.metadata_type = metadata_type
        super().__init__(
            f"Unable to retrieve the {metadata_type} for file at location: {location}",
            reason,
        )

    @classmethod
    def visibility(cls, location: str, reason: str = "", previous=None):
        return cls(location, "visibility", _reason_of(previous, reason))

    @classmethod
    def mime_type(cls, location: str, reason: str = "", previous=None):
        return cls(location, "mime_type", _reason_of(previous, reason))

    @classmethod
    def file_size(cls, location: str, reason: str = "", previous=None):
        return cls(location, "file_size", _reason_of(previous, reason))

    @classmethod
    def last_modified(cls, location: str, reason: str = "", previous=None):
        return cls(location, "last_modified", _reason_of(previous, reason))
