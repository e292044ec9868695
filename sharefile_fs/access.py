# access.py
import logging
from enum import Enum

from .storage.dto import RemoteItem


class Capability(str, Enum):
    """ShareFile access control flags found in a folder's Info map."""

    CAN_ADD_FOLDER = "CanAddFolder"
    CAN_ADD_NODE = "CanAddNode"
    CAN_VIEW = "CanView"
    CAN_DOWNLOAD = "CanDownload"
    CAN_UPLOAD = "CanUpload"
    CAN_SEND = "CanSend"
    CAN_DELETE_CURRENT_ITEM = "CanDeleteCurrentItem"
    CAN_DELETE_CHILD_ITEMS = "CanDeleteChildItems"
    CAN_MANAGE_PERMISSIONS = "CanManagePermissions"
    CAN_CREATE_OFFICE_DOCUMENTS = "CanCreateOfficeDocuments"


class AccessGuard:
    """
    Checks ShareFile capability flags before an operation runs.

    Files carry no flags of their own: a check against a file is evaluated on
    its parent folder, and deleting the file requires the parent's
    CanDeleteChildItems flag.
    """

    def __init__(self, client):
        self.client = client

    def authorized(self, item: RemoteItem, capability: Capability) -> bool:
        capability = Capability(capability)

        if item.is_file:
            if item.parent is None:
                logging.warning(f"Item '{item.id}' has no parent reference; access denied.")
                return False
            try:
                item = RemoteItem.from_api(self.client.get_item_by_id(item.parent.id))
            except Exception as e:
                logging.warning(
                    f"Failed to fetch parent folder '{item.parent.id}' for access check: {e}"
                )
                return False
            if capability is Capability.CAN_DELETE_CURRENT_ITEM:
                capability = Capability.CAN_DELETE_CHILD_ITEMS

        return item.info.get(capability.value) == 1
