# sharefile.py
import hashlib
import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import RemoteCallFailed

DEFAULT_UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024


class ShareFileApiError(RemoteCallFailed):
    """Raised when the ShareFile API returns a non-2xx response or cannot be reached."""

    def __init__(self, status_code: Optional[int], message: str):
        if status_code is None:
            super().__init__(f"ShareFile API request failed: {message}")
        else:
            super().__init__(f"ShareFile API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response: requests.Response) -> str:
    """Extracts the human readable message from a ShareFile error body."""
    try:
        body = response.json()
    except ValueError:
        return response.reason or response.text
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, dict):
        return message.get("value") or response.reason
    return message or response.reason


class ShareFileClient:
    """
    Thin client for the ShareFile REST API (v3).
    Expects a ready-to-use OAuth access token; obtaining and refreshing it is
    left to the caller.
    """

    def __init__(
        self,
        subdomain: str,
        access_token: str,
        timeout: float = 30,
        upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = f"https://{subdomain}.sf-api.com/sf/v3"
        self.timeout = timeout
        self.upload_chunk_size = upload_chunk_size
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            }
        )
        logging.info(f"ShareFile client initialized for {self.base_url}.")

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}/{endpoint}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logging.error(f"ShareFile request {method} {endpoint} failed: {e}")
            raise ShareFileApiError(None, str(e)) from e

        if not response.ok:
            message = _error_message(response)
            logging.error(
                f"ShareFile request {method} {endpoint} returned {response.status_code}: {message}"
            )
            raise ShareFileApiError(response.status_code, message)
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        return response.json()

    def get_item_by_path(self, path: str) -> Dict[str, Any]:
        """
        Returns the item at an absolute ShareFile path, e.g. '/Folder/file.txt'.
        """
        response = self._request("GET", "Items/ByPath", params={"path": path})
        return self._json(response)

    def get_item_by_id(self, item_id: str, get_children: bool = False) -> Dict[str, Any]:
        """
        Returns an item by ID, optionally with its direct children under 'Children'.
        """
        params = {"$expand": "Children"} if get_children else None
        response = self._request("GET", f"Items({item_id})", params=params)
        return self._json(response)

    def create_folder(
        self, parent_id: str, name: str, description: str = "", overwrite: bool = False
    ) -> Dict[str, Any]:
        logging.info(f"Creating folder '{name}' in item '{parent_id}'...")
        response = self._request(
            "POST",
            f"Items({parent_id})/Folder",
            params={"overwrite": str(overwrite).lower(), "passthrough": "false"},
            json={"Name": name, "Description": description},
        )
        return self._json(response)

    def copy_item(self, target_id: str, item_id: str, overwrite: bool = False) -> Dict[str, Any]:
        logging.info(f"Copying item '{item_id}' to folder '{target_id}'...")
        response = self._request(
            "POST",
            f"Items({item_id})/Copy",
            params={"targetid": target_id, "overwrite": str(overwrite).lower()},
        )
        return self._json(response)

    def update_item(self, item_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        logging.info(f"Updating item '{item_id}'...")
        response = self._request(
            "PATCH",
            f"Items({item_id})",
            params={"forceSync": "true", "notify": "true"},
            json=data,
        )
        return self._json(response)

    def delete_item(self, item_id: str) -> None:
        logging.info(f"Deleting item '{item_id}'...")
        self._request(
            "DELETE",
            f"Items({item_id})",
            params={"singleversion": "false", "forceSync": "false"},
        )

    def get_item_contents(self, item_id: str) -> bytes:
        logging.info(f"Downloading contents of item '{item_id}'...")
        response = self._request(
            "GET",
            f"Items({item_id})/Download",
            params={"includeallversions": "false", "redirect": "true"},
        )
        return response.content

    def get_item_download_url(self, item_id: str) -> Dict[str, Any]:
        response = self._request(
            "GET",
            f"Items({item_id})/Download",
            params={"includeallversions": "false", "redirect": "false"},
        )
        return self._json(response)

    def _get_chunk_uri(self, folder_id: str, filename: str, unzip: bool, overwrite: bool) -> str:
        response = self._request(
            "POST",
            f"Items({folder_id})/Upload2",
            json={
                "Method": "Streamed",
                "Raw": True,
                "FileName": filename,
                "Unzip": unzip,
                "Overwrite": overwrite,
            },
        )
        chunk_uri = self._json(response).get("ChunkUri")
        if not chunk_uri:
            raise ShareFileApiError(response.status_code, "Upload response did not contain a ChunkUri")
        return chunk_uri

    def upload_file_streamed(
        self, stream, folder_id: str, filename: str, unzip: bool = False, overwrite: bool = True
    ) -> None:
        """
        Uploads a readable stream to a folder using the streamed chunk protocol.

        Every chunk is posted with its index, byte offset and MD5 hash; the
        last one also carries finish=true, the total size and the hash of the
        whole file.

        :param stream: Binary (or text) file-like object positioned at the start.
        :param folder_id: ID of the destination folder.
        :param filename: Name of the file to create.
        :param unzip: Ask ShareFile to extract an uploaded zip archive.
        :param overwrite: Replace an existing file with the same name.
        """
        chunk_uri = self._get_chunk_uri(folder_id, filename, unzip, overwrite)
        logging.info(f"Uploading '{filename}' to folder '{folder_id}'...")

        file_hash = hashlib.md5()
        index, offset = 0, 0
        chunk = self._read_chunk(stream)
        while True:
            next_chunk = self._read_chunk(stream)
            file_hash.update(chunk)
            params = {
                "index": index,
                "byteOffset": offset,
                "hash": hashlib.md5(chunk).hexdigest(),
            }
            if not next_chunk:
                params.update(
                    {
                        "finish": "true",
                        "fileSize": offset + len(chunk),
                        "fileHash": file_hash.hexdigest(),
                    }
                )
            self._request(
                "POST",
                chunk_uri,
                params=params,
                data=chunk,
                headers={"Content-Type": "application/octet-stream"},
            )
            if not next_chunk:
                break
            offset += len(chunk)
            index += 1
            chunk = next_chunk

        logging.info(f"Upload of '{filename}' completed ({offset + len(chunk)} bytes).")

    def _read_chunk(self, stream) -> bytes:
        data = stream.read(self.upload_chunk_size)
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data or b""


def sharefile_client_from_settings(settings) -> ShareFileClient:
    """Constructs a ShareFileClient from application settings."""
    return ShareFileClient(
        subdomain=settings.SHAREFILE_SUBDOMAIN,
        access_token=settings.SHAREFILE_ACCESS_TOKEN,
        timeout=settings.SHAREFILE_REQUEST_TIMEOUT,
        upload_chunk_size=settings.SHAREFILE_UPLOAD_CHUNK_SIZE,
    )
