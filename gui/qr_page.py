"""
QR code management page
"""
from typing import List

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QAbstractItemView, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QLineEdit, QListWidget, QListWidgetItem, QPushButton, QVBoxLayout, QWidget
)

import config
from core.qr_api import QRRecord, UserOption, edit_location, qrcode_path
from gui.forms import FormWidget

GROUP_STYLE = """
    QGroupBox {
        font-size: 14px;
        font-weight: bold;
        border: 2px solid #667eea;
        border-radius: 10px;
        margin-top: 10px;
        padding-top: 10px;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        left: 10px;
        padding: 0 5px;
    }
"""

class QRCodeEntry(QWidget):
    """One rendered QR code: its data, a delete form and an edit link"""
    link_activated = pyqtSignal(str)

    def __init__(self, record: QRRecord, parent=None):
        super().__init__(parent)
        self.record = record
        self.edit_href = edit_location(record.id)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(5, 2, 5, 2)

        self.data_label = QLabel(record.data)
        self.data_label.setTextFormat(Qt.TextFormat.PlainText)
        layout.addWidget(self.data_label)
        layout.addStretch()

        self.delete_form = FormWidget("DELETE", qrcode_path(record.id))
        delete_layout = QHBoxLayout(self.delete_form)
        delete_layout.setContentsMargins(0, 0, 0, 0)
        self.delete_button = QPushButton("Delete")
        self.delete_button.setStyleSheet("background: #dc3545; color: white; padding: 4px 12px;")
        self.delete_button.clicked.connect(self.delete_form.submit)
        delete_layout.addWidget(self.delete_button)
        layout.addWidget(self.delete_form)

        self.edit_link = QLabel(f'<a href="{self.edit_href}">Edit</a>')
        self.edit_link.setTextFormat(Qt.TextFormat.RichText)
        self.edit_link.linkActivated.connect(self.link_activated.emit)
        layout.addWidget(self.edit_link)

class QRManagerPage(QWidget):
    """
    The management page.

    Widgets the controller works with carry an object name, the same way
    elements of a web page carry an id.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setup_ui()

    def setup_ui(self):
        """Setup page UI"""
        layout = QVBoxLayout(self)
        layout.setSpacing(15)
        layout.setContentsMargins(20, 20, 20, 20)

        title = QLabel(f"📱 {config.APP_NAME}")
        title.setStyleSheet("font-size: 22px; font-weight: bold; color: #667eea;")
        layout.addWidget(title)

        # Users
        users_group = QGroupBox("Users")
        users_group.setStyleSheet(GROUP_STYLE)
        users_layout = QVBoxLayout(users_group)
        self.user_select = QListWidget()
        self.user_select.setObjectName("userSelect")
        self.user_select.setSelectionMode(QAbstractItemView.SelectionMode.MultiSelection)
        self.user_select.setMaximumHeight(140)
        users_layout.addWidget(self.user_select)
        layout.addWidget(users_group)

        # QR code list
        self.qrcode_section = QGroupBox("QR Codes")
        self.qrcode_section.setObjectName("qrcodeSection")
        self.qrcode_section.setStyleSheet(GROUP_STYLE)
        section_layout = QVBoxLayout(self.qrcode_section)
        self.qrcode_list = QListWidget()
        self.qrcode_list.setObjectName("qrcodeList")
        section_layout.addWidget(self.qrcode_list)

        # Add form
        self.add_form = FormWidget("POST", "/api/qrcodes")
        self.add_form.setObjectName("addQRCodeForm")
        add_layout = QHBoxLayout(self.add_form)
        add_layout.setContentsMargins(0, 0, 0, 0)
        self.add_data = self.add_form.add_field("data", QLineEdit())
        self.add_data.setObjectName("addData")
        self.add_data.setPlaceholderText("Text or URL to encode")
        self.add_data.setMaxLength(config.QR_DATA_MAX_LENGTH)
        add_layout.addWidget(self.add_data)
        self.selected_user_ids = self.add_form.add_field("userIds", QLineEdit())
        self.selected_user_ids.setObjectName("selectedUserIds")
        self.selected_user_ids.hide()
        add_layout.addWidget(self.selected_user_ids)
        add_button = QPushButton("➕ Add QR Code")
        add_button.clicked.connect(self.add_form.submit)
        self.add_data.returnPressed.connect(self.add_form.submit)
        add_layout.addWidget(add_button)
        section_layout.addWidget(self.add_form)

        self.qrcode_section.hide()
        layout.addWidget(self.qrcode_section)

        # Edit section
        self.edit_section = QGroupBox("Edit QR Code")
        self.edit_section.setObjectName("editQRCodeSection")
        self.edit_section.setStyleSheet(GROUP_STYLE)
        edit_section_layout = QVBoxLayout(self.edit_section)
        self.edit_form = FormWidget("PUT", "")
        self.edit_form.setObjectName("editQRCodeForm")
        edit_layout = QFormLayout(self.edit_form)
        self.edit_data = self.edit_form.add_field("data", QLineEdit())
        self.edit_data.setObjectName("editData")
        self.edit_data.setMaxLength(config.QR_DATA_MAX_LENGTH)
        edit_layout.addRow("Data:", self.edit_data)
        self.edit_user_ids = self.edit_form.add_field("userIds", QLineEdit())
        self.edit_user_ids.setObjectName("editUserIds")
        edit_layout.addRow("User IDs:", self.edit_user_ids)

        buttons = QHBoxLayout()
        save_button = QPushButton("💾 Save")
        save_button.clicked.connect(self.edit_form.submit)
        buttons.addWidget(save_button)
        cancel_button = QPushButton("Cancel")
        cancel_button.setObjectName("cancelEditButton")
        buttons.addWidget(cancel_button)
        buttons.addStretch()
        edit_layout.addRow(buttons)
        edit_section_layout.addWidget(self.edit_form)

        self.edit_section.hide()
        layout.addWidget(self.edit_section)

        layout.addStretch()

    def set_users(self, users: List[UserOption]):
        """Replace the selectable accounts"""
        self.user_select.clear()
        for user in users:
            item = QListWidgetItem(user.name)
            item.setData(Qt.ItemDataRole.UserRole, user.id)
            self.user_select.addItem(item)
