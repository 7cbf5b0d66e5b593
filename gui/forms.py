"""
Form container with browser-like submission
"""
import logging
from typing import Dict

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QLineEdit, QWidget

logger = logging.getLogger(__name__)

class FormWidget(QWidget):
    """
    A widget that submits its named fields like an HTML form.

    submit() first emits `submitting` synchronously, so connected handlers
    can still change field values, then serializes the fields and emits
    `submitted(method, action, fields)`. Whoever plays the browser performs
    the actual request.
    """
    submitting = pyqtSignal()
    submitted = pyqtSignal(str, str, dict)  # method, action, fields

    def __init__(self, method: str = "POST", action: str = "", parent=None):
        super().__init__(parent)
        self.method = method.upper()
        self.action = action
        self.fields: Dict[str, QLineEdit] = {}

    def add_field(self, name: str, widget: QLineEdit) -> QLineEdit:
        """Register an input under its form field name"""
        self.fields[name] = widget
        return widget

    def serialize(self) -> Dict[str, str]:
        return {name: widget.text() for name, widget in self.fields.items()}

    def submit(self):
        """Submit the form"""
        self.submitting.emit()
        fields = self.serialize()
        logger.debug(f"Submitting {self.method} {self.action} with fields {sorted(fields)}")
        self.submitted.emit(self.method, self.action, fields)
