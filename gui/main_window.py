"""
Main GUI window for QR Code Manager
"""
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLabel
)
from typing import Dict, List, Optional
import logging
import config
from core.qr_api import QRCodeApi, UserOption
from gui.controller import QRPageController
from gui.qr_page import QRManagerPage
from gui.workers import FormSubmitThread, UsersLoadThread

logger = logging.getLogger(__name__)

class MainWindow(QMainWindow):
    """
    Main application window.

    Acts as the browser for the management page: it owns the current
    location, rebuilds the page on every navigation and sends submitted
    forms to the backend.
    """

    def __init__(self, api: QRCodeApi = None):
        super().__init__()
        self.setWindowTitle(f"{config.APP_NAME} v{config.APP_VERSION}")
        self.setGeometry(100, 100, config.WINDOW_WIDTH, config.WINDOW_HEIGHT)

        self.api = api or QRCodeApi()
        self.location = config.HOME_LOCATION
        self.page: Optional[QRManagerPage] = None
        self.controller: Optional[QRPageController] = None
        self.users_thread: Optional[UsersLoadThread] = None
        self.submit_threads: List[FormSubmitThread] = []
        self.retired_controllers: List[QRPageController] = []

        self.setup_ui()
        logger.info("Main window created")

    def setup_ui(self):
        """Setup the main UI"""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        self.main_layout = QVBoxLayout(central_widget)
        self.main_layout.addWidget(self.create_header())

        self.statusBar().showMessage("Ready")

    def create_header(self) -> QWidget:
        """Create header with location and controls"""
        header = QWidget()
        header.setStyleSheet("""
            QWidget {
                background: qlineargradient(x1:0, y1:0, x2:1, y2:0,
                    stop:0 #667eea, stop:1 #764ba2);
                padding: 10px;
                border-radius: 10px;
            }
            QLabel {
                color: white;
                font-size: 14px;
            }
            QPushButton {
                background: white;
                color: #667eea;
                border: none;
                padding: 6px 16px;
                border-radius: 5px;
                font-weight: bold;
            }
            QPushButton:hover {
                background: #f0f0f0;
            }
        """)

        layout = QHBoxLayout(header)

        self.location_label = QLabel(self.location)
        layout.addWidget(self.location_label)

        layout.addStretch()

        home_button = QPushButton("🏠 Home")
        home_button.clicked.connect(lambda: self.navigate(config.HOME_LOCATION))
        layout.addWidget(home_button)

        reload_button = QPushButton("🔄 Reload")
        reload_button.clicked.connect(lambda: self.navigate(self.location))
        layout.addWidget(reload_button)

        return header

    def navigate(self, location: str):
        """Tear down the current page and load a fresh one at location"""
        logger.info(f"Navigating to {location}")
        self.retire_page()

        self.location = location
        self.location_label.setText(location)

        self.page = QRManagerPage()
        self.controller = QRPageController(self.api, self)
        self.controller.bind(self.page)
        self.main_layout.addWidget(self.page)

        self.load_users()
        self.controller.load(location)
        self.statusBar().showMessage(f"Loaded {location}")

    def retire_page(self):
        """Drop the current page; its pending jobs finish in the background"""
        self.retired_controllers = [
            c for c in self.retired_controllers if c.has_running_jobs()
        ]
        if self.controller:
            self.controller.unbind()
            if self.controller.has_running_jobs():
                self.retired_controllers.append(self.controller)
            self.controller = None
        if self.page:
            self.main_layout.removeWidget(self.page)
            self.page.deleteLater()
            self.page = None

    def load_users(self):
        """Load the selectable accounts into the page"""
        if self.users_thread and self.users_thread.isRunning():
            self.users_thread.wait()
        self.users_thread = UsersLoadThread(self.api)
        self.users_thread.users_loaded.connect(self.on_users_loaded)
        self.users_thread.load_failed.connect(self.on_users_failed)
        self.users_thread.start()

    def on_users_loaded(self, users: List[UserOption]):
        if self.page:
            self.page.set_users(users)
        logger.info(f"Loaded {len(users)} user(s)")

    def on_users_failed(self, error: str):
        self.statusBar().showMessage("Could not load users")
        logger.error(f"Error fetching users: {error}")

    def submit_form(self, method: str, action: str, fields: Dict[str, str]):
        """Send a submitted form, then go back home like a redirect would"""
        thread = FormSubmitThread(self.api, method, action, fields)
        thread.submit_completed.connect(self.on_submit_completed)
        thread.submit_failed.connect(self.on_submit_failed)
        thread.finished.connect(lambda: self.submit_threads.remove(thread))
        self.submit_threads.append(thread)
        thread.start()
        self.statusBar().showMessage(f"{method} {action}...")

    def on_submit_completed(self, status: int):
        self.navigate(config.HOME_LOCATION)
        self.statusBar().showMessage(f"Saved ({status})")

    def on_submit_failed(self, error: str):
        self.statusBar().showMessage(f"Request failed: {error}")

    def wait_for_jobs(self):
        """Block until every background job has finished"""
        for thread in list(self.submit_threads):
            thread.wait()
        if self.users_thread:
            self.users_thread.wait()
        for controller in [self.controller] + self.retired_controllers:
            if controller:
                controller.wait_for_threads()

    def start_web_server(self):
        """Start FastAPI web server in background"""
        import threading
        import uvicorn
        from server.app import app

        def run_server():
            uvicorn.run(
                app,
                host=config.SERVER_HOST,
                port=config.SERVER_PORT,
                log_level="warning"
            )

        server_thread = threading.Thread(target=run_server, daemon=True)
        server_thread.start()

        logger.info(f"Web server started on port {config.SERVER_PORT}")

    def closeEvent(self, event):
        """Handle window close event"""
        self.retire_page()
        self.wait_for_jobs()
        event.accept()
