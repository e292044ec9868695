# resolver.py
import logging
from typing import Optional

from . import paths
from .storage.dto import RemoteItem


class PathResolver:
    """
    Resolves virtual paths to ShareFile items under a fixed root prefix.
    A path that cannot be resolved for any reason comes back as None.
    """

    def __init__(self, client, prefix: str = ""):
        self.client = client
        self.prefix = paths.normalize(prefix)

    def absolute_path(self, path: str) -> str:
        return paths.apply_prefix(self.prefix, path)

    def resolve(self, path: str) -> Optional[RemoteItem]:
        absolute = self.absolute_path(path)
        try:
            item = RemoteItem.from_api(self.client.get_item_by_path(absolute))
        except Exception as e:
            logging.debug(f"Could not resolve '{absolute}': {e}")
            return None

        if item.is_file or item.is_folder:
            return item

        logging.debug(f"Ignoring item at '{absolute}' with unsupported type.")
        return None
