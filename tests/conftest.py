# tests/conftest.py
import itertools
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sharefile_fs.adapter import SharefileAdapter
from sharefile_fs.config import Settings, get_settings
from sharefile_fs.sharefile import ShareFileApiError
from sharefile_fs.storage.dto import ODATA_TYPE_FILE, ODATA_TYPE_FOLDER

PREFIX = "unittest"

ALL_FLAGS = [
    "CanAddFolder",
    "CanAddNode",
    "CanView",
    "CanDownload",
    "CanUpload",
    "CanSend",
    "CanDeleteCurrentItem",
    "CanDeleteChildItems",
    "CanManagePermissions",
    "CanCreateOfficeDocuments",
]


def full_access(value=1):
    return {flag: value for flag in ALL_FLAGS}


def sharefile_file(name, item_id="2", parent_id="1", **extra):
    item = {
        "odata.type": ODATA_TYPE_FILE,
        "Id": item_id,
        "FileName": name,
        "FileSizeBytes": 1024,
        "ClientModifiedDate": "2017-09-04T21:48:44Z",
        "Parent": {"Id": parent_id},
    }
    item.update(extra)
    return item


def sharefile_folder(name, item_id="1", info=None, **extra):
    item = {
        "odata.type": ODATA_TYPE_FOLDER,
        "Id": item_id,
        "FileName": name,
        "FileSizeBytes": 0,
        "CreationDate": "2017-09-04T21:48:44Z",
        "Info": full_access() if info is None else info,
    }
    item.update(extra)
    return item


class RemoteTree:
    """
    In-memory stand-in for a ShareFile account, keyed by absolute path.
    Wired into a MagicMock client so tests can still assert on calls.
    """

    def __init__(self, prefix=PREFIX):
        self.prefix = prefix
        self.by_path = {}
        self.contents = {}
        self._ids = itertools.count(100)

    def absolute(self, path):
        return "/" + f"{self.prefix}/{path.strip('/')}".strip("/")

    def add(self, path, raw, contents=None):
        self.by_path[self.absolute(path)] = raw
        if contents is not None:
            self.contents[str(raw["Id"])] = contents
        return raw

    def path_of(self, item_id):
        for path, raw in self.by_path.items():
            if str(raw["Id"]) == str(item_id):
                return path
        raise ShareFileApiError(404, f"Item {item_id} not found")

    def get_item_by_path(self, path):
        if path not in self.by_path:
            raise ShareFileApiError(404, "The item could not be found")
        return self.by_path[path]

    def get_item_by_id(self, item_id, get_children=False):
        folder_path = self.path_of(item_id)
        raw = dict(self.by_path[folder_path])
        if get_children:
            raw["Children"] = [
                child
                for path, child in self.by_path.items()
                if path.rsplit("/", 1)[0] == folder_path and path != folder_path
            ]
        return raw

    def delete_item(self, item_id):
        doomed = self.path_of(item_id)
        for path in list(self.by_path):
            if path == doomed or path.startswith(doomed + "/"):
                del self.by_path[path]

    def upload_file_streamed(self, stream, folder_id, filename, unzip, overwrite):
        folder_path = self.path_of(folder_id)
        data = stream.read()
        item_id = str(next(self._ids))
        self.by_path[f"{folder_path}/{filename}"] = sharefile_file(
            filename, item_id=item_id, parent_id=str(folder_id), FileSizeBytes=len(data)
        )
        self.contents[item_id] = data

    def get_item_contents(self, item_id):
        return self.contents.get(str(item_id), b"")

    def create_folder(self, parent_id, name, description, overwrite):
        folder_path = self.path_of(parent_id)
        raw = sharefile_folder(name, item_id=str(next(self._ids)))
        self.by_path[f"{folder_path}/{name}"] = raw
        return raw


@pytest.fixture
def mock_settings():
    """
    Provides a mock of the application settings for testing.
    This avoids the need for environment variables during tests.
    """
    settings = MagicMock(spec=Settings)
    settings.SHAREFILE_SUBDOMAIN = "acme"
    settings.SHAREFILE_ACCESS_TOKEN = "test_token"
    settings.SHAREFILE_ROOT_PREFIX = PREFIX
    settings.SHAREFILE_INCLUDE_RAW_ITEM = False
    settings.SHAREFILE_REQUEST_TIMEOUT = 5
    settings.SHAREFILE_UPLOAD_CHUNK_SIZE = 1024
    settings.LOG_LEVEL = "INFO"
    settings.LOG_FILE = Path("/tmp/sharefile-fs.log")
    return settings


@pytest.fixture(autouse=True)
def patch_settings_class(monkeypatch, mock_settings):
    """
    Replaces the `Settings` constructor so no real settings are ever loaded,
    and clears the cached instance from any earlier call.
    """
    get_settings.cache_clear()
    monkeypatch.setattr("sharefile_fs.config.Settings", lambda *args, **kwargs: mock_settings)
    yield
    get_settings.cache_clear()


@pytest.fixture
def tree():
    remote = RemoteTree()
    remote.add("", sharefile_folder(PREFIX, item_id="1"))
    return remote


@pytest.fixture
def client(tree):
    """A mock ShareFile client backed by the in-memory tree."""
    client = MagicMock()
    client.get_item_by_path.side_effect = tree.get_item_by_path
    client.get_item_by_id.side_effect = tree.get_item_by_id
    client.delete_item.side_effect = tree.delete_item
    client.upload_file_streamed.side_effect = tree.upload_file_streamed
    client.get_item_contents.side_effect = tree.get_item_contents
    client.create_folder.side_effect = tree.create_folder
    return client


@pytest.fixture
def adapter(client):
    return SharefileAdapter(client, PREFIX)
