"""
Background threads for talking to the QR code backend

Each thread runs a single job on its own asyncio loop and reports back to
the GUI thread through signals.
"""
import asyncio
import logging
from typing import Dict, List

from PyQt6.QtCore import QThread, pyqtSignal

from core.join import Joined
from core.qr_api import QRCodeApi

logger = logging.getLogger(__name__)

class QRCodeFetchThread(QThread):
    """Thread for fetching and merging the QR codes of selected users"""
    codes_loaded = pyqtSignal(object)  # List[QRRecord]
    fetch_failed = pyqtSignal(str)

    def __init__(self, api: QRCodeApi, user_ids: List[str]):
        super().__init__()
        self.api = api
        self.user_ids = list(user_ids)

    def run(self):
        """Fetch all lists, emit the merged one or the first error"""
        try:
            result = asyncio.run(self.api.fetch_for_users(self.user_ids))
        except Exception as e:
            logger.error(f"Fetching QR codes failed: {e}")
            self.fetch_failed.emit(str(e))
            return
        if isinstance(result, Joined):
            self.codes_loaded.emit(result.values)
        else:
            self.fetch_failed.emit(str(result.error))

class QRCodeLoadThread(QThread):
    """Thread for loading a single QR code"""
    code_loaded = pyqtSignal(object)  # QRRecord
    load_failed = pyqtSignal(str)

    def __init__(self, api: QRCodeApi, qr_id: str):
        super().__init__()
        self.api = api
        self.qr_id = qr_id

    def run(self):
        try:
            record = asyncio.run(self.api.get_qrcode(self.qr_id))
        except Exception as e:
            logger.error(f"Loading QR code {self.qr_id} failed: {e}")
            self.load_failed.emit(str(e))
            return
        self.code_loaded.emit(record)

class UsersLoadThread(QThread):
    """Thread for loading the selectable accounts"""
    users_loaded = pyqtSignal(object)  # List[UserOption]
    load_failed = pyqtSignal(str)

    def __init__(self, api: QRCodeApi):
        super().__init__()
        self.api = api

    def run(self):
        try:
            users = asyncio.run(self.api.list_users())
        except Exception as e:
            logger.error(f"Loading users failed: {e}")
            self.load_failed.emit(str(e))
            return
        self.users_loaded.emit(users)

class FormSubmitThread(QThread):
    """Thread for sending a submitted form"""
    submit_completed = pyqtSignal(int)  # status code
    submit_failed = pyqtSignal(str)

    def __init__(self, api: QRCodeApi, method: str, action: str, fields: Dict[str, str]):
        super().__init__()
        self.api = api
        self.method = method
        self.action = action
        self.fields = dict(fields)

    def run(self):
        try:
            status = asyncio.run(self.api.submit_form(self.method, self.action, self.fields))
        except Exception as e:
            logger.error(f"Form submission failed: {e}")
            self.submit_failed.emit(str(e))
            return
        self.submit_completed.emit(status)
