"""
Controller for the QR code management page

Binds to a page by object name and wires up the list synchronization,
edit prefill, submit relay and cancel edit flows.
"""
import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractButton, QLineEdit, QListWidget, QListWidgetItem, QWidget

import config
from core.qr_api import QRCodeApi, QRRecord, edit_target, join_ids, qrcode_path
from gui.forms import FormWidget
from gui.qr_page import QRCodeEntry
from gui.workers import QRCodeFetchThread, QRCodeLoadThread

logger = logging.getLogger(__name__)

# object name -> expected widget type
REQUIRED_ELEMENTS = {
    "userSelect": QListWidget,
    "qrcodeSection": QWidget,
    "qrcodeList": QListWidget,
    "addQRCodeForm": FormWidget,
    "selectedUserIds": QLineEdit,
    "editQRCodeSection": QWidget,
    "editQRCodeForm": FormWidget,
    "editData": QLineEdit,
    "editUserIds": QLineEdit,
    "cancelEditButton": QAbstractButton,
}

class MissingElementError(RuntimeError):
    """The page lacks widgets the controller needs"""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Required page element(s) not found: {', '.join(self.missing)}")

class QRPageController(QObject):
    """
    Drives a QR code management page.

    `navigator` plays the browser. It must provide navigate(location) and
    submit_form(method, action, fields).
    """
    list_rendered = pyqtSignal(int)  # number of entries
    list_fetch_failed = pyqtSignal(str)
    edit_prefilled = pyqtSignal(object)  # QRRecord
    edit_prefill_failed = pyqtSignal(str)

    def __init__(self, api: QRCodeApi, navigator, parent=None):
        super().__init__(parent)
        self.api = api
        self.navigator = navigator
        self.root: Optional[QWidget] = None
        self._threads: List[QThread] = []

    # Initialization

    def bind(self, root: QWidget):
        """Look up every required widget under root, fail on any missing"""
        found = {}
        missing = []
        for name, widget_type in REQUIRED_ELEMENTS.items():
            widget = root.findChild(widget_type, name)
            if widget is None:
                missing.append(name)
            else:
                found[name] = widget
        if missing:
            raise MissingElementError(missing)

        self.root = root
        self.user_select: QListWidget = found["userSelect"]
        self.qrcode_section: QWidget = found["qrcodeSection"]
        self.qrcode_list: QListWidget = found["qrcodeList"]
        self.add_form: FormWidget = found["addQRCodeForm"]
        self.selected_user_ids: QLineEdit = found["selectedUserIds"]
        self.edit_section: QWidget = found["editQRCodeSection"]
        self.edit_form: FormWidget = found["editQRCodeForm"]
        self.edit_data: QLineEdit = found["editData"]
        self.edit_user_ids: QLineEdit = found["editUserIds"]
        cancel_button: QAbstractButton = found["cancelEditButton"]

        self.user_select.itemSelectionChanged.connect(self.on_selection_changed)
        self.add_form.submitting.connect(self.on_add_form_submitting)
        self.add_form.submitted.connect(self.navigator.submit_form)
        self.edit_form.submitted.connect(self.navigator.submit_form)
        cancel_button.clicked.connect(self.cancel_edit)
        logger.debug("Controller bound to page")

    def unbind(self):
        """Detach from the page; late results of running jobs are dropped"""
        self.root = None

    @property
    def bound(self) -> bool:
        return self.root is not None

    def load(self, location: str):
        """Page load: start the edit prefill when the location targets a record"""
        qr_id = edit_target(location)
        if qr_id is not None:
            self.prefill_edit(qr_id)

    # Selection

    def selected_user_ids_in_order(self) -> List[str]:
        """Selected option values, in option order"""
        ids = []
        for row in range(self.user_select.count()):
            item = self.user_select.item(row)
            if item.isSelected():
                ids.append(str(item.data(Qt.ItemDataRole.UserRole)))
        return ids

    def on_selection_changed(self):
        """Show and refresh the list for a non-empty selection, hide it otherwise"""
        user_ids = self.selected_user_ids_in_order()
        if user_ids:
            self.qrcode_section.show()
            self.selected_user_ids.setText(join_ids(user_ids))
            self.refresh_list(user_ids)
        else:
            # A fetch still running may later render into the hidden list.
            self.qrcode_section.hide()
            self.qrcode_list.clear()

    # Fetch and merge

    def refresh_list(self, user_ids: List[str]):
        """Fetch the QR codes of user_ids in the background and render them"""
        logger.info(f"Fetching QR codes for users {join_ids(user_ids)}")
        thread = QRCodeFetchThread(self.api, user_ids)
        thread.codes_loaded.connect(self.render)
        thread.fetch_failed.connect(self.on_fetch_failed)
        self._start(thread)

    def on_fetch_failed(self, error: str):
        logger.error(f"Error fetching QR codes: {error}")
        self.list_fetch_failed.emit(error)

    # Rendering

    def render(self, records: List[QRRecord]):
        """Replace the rendered list with one entry per record"""
        if not self.bound:
            return
        self.qrcode_list.clear()
        for record in records:
            entry = QRCodeEntry(record)
            entry.delete_form.submitted.connect(self.navigator.submit_form)
            entry.link_activated.connect(self.navigator.navigate)
            item = QListWidgetItem()
            item.setSizeHint(entry.sizeHint())
            self.qrcode_list.addItem(item)
            self.qrcode_list.setItemWidget(item, entry)
        self.list_rendered.emit(len(records))

    def rendered_entries(self) -> List[QRCodeEntry]:
        return [
            self.qrcode_list.itemWidget(self.qrcode_list.item(row))
            for row in range(self.qrcode_list.count())
        ]

    # Edit

    def prefill_edit(self, qr_id: str):
        """Load a record into the edit form"""
        logger.info(f"Loading QR code {qr_id} for edit")
        thread = QRCodeLoadThread(self.api, qr_id)
        thread.code_loaded.connect(self.on_edit_record_loaded)
        thread.load_failed.connect(self.on_edit_record_failed)
        self._start(thread)

    def on_edit_record_loaded(self, record: QRRecord):
        # The user ids come from the live selection, not from the record's
        # owners, which the endpoint does not return.
        if not self.bound:
            return
        self.edit_form.action = qrcode_path(record.id)
        self.edit_section.show()
        self.edit_data.setText(record.data)
        self.edit_user_ids.setText(join_ids(self.selected_user_ids_in_order()))
        self.edit_prefilled.emit(record)

    def on_edit_record_failed(self, error: str):
        logger.error(f"Error fetching QR code for edit: {error}")
        self.edit_prefill_failed.emit(error)

    def cancel_edit(self):
        """Hide the edit section and go back home"""
        self.edit_section.hide()
        self.navigator.navigate(config.HOME_LOCATION)

    # Add form

    def on_add_form_submitting(self):
        self.selected_user_ids.setText(join_ids(self.selected_user_ids_in_order()))

    # Threads

    def _start(self, thread: QThread):
        # Stale threads are not cancelled; keep a reference until they finish.
        self._threads.append(thread)
        thread.finished.connect(lambda: self._forget(thread))
        thread.start()

    def _forget(self, thread: QThread):
        if thread in self._threads:
            self._threads.remove(thread)

    def has_running_jobs(self) -> bool:
        return bool(self._threads)

    def wait_for_threads(self):
        """Block until every background job has finished"""
        for thread in list(self._threads):
            thread.wait()
