# streams.py
import logging
from typing import Iterator, Optional

import requests

DEFAULT_CHUNK_SIZE = 64 * 1024


class RemoteStream:
    """
    A read handle on a ShareFile download URL.

    The handle is owned by the caller: close it explicitly or use it as a
    context manager. The adapter keeps no reference to it.
    """

    def __init__(self, response: requests.Response, url: str = ""):
        self._response = response
        self.url = url
        self._closed = False

    @classmethod
    def open(cls, url: str, timeout: Optional[float] = None) -> "RemoteStream":
        logging.info("Opening download stream...")
        response = requests.get(url, stream=True, timeout=timeout)
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            response.close()
            raise
        return cls(response, url)

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise ValueError("I/O operation on closed stream.")
        if size is None or size < 0:
            return self._response.raw.read(decode_content=True)
        return self._response.raw.read(size, decode_content=True)

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        if self._closed:
            raise ValueError("I/O operation on closed stream.")
        yield from self._response.iter_content(chunk_size=chunk_size)

    def close(self) -> None:
        if not self._closed:
            self._response.close()
            self._closed = True

    def __enter__(self) -> "RemoteStream":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
