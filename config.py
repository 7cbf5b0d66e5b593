"""
Configuration file for QR Code Manager
"""
import os
from pathlib import Path

# Application Info
APP_NAME = "QR Code Manager"
APP_VERSION = "1.0.0"

# Paths
BASE_DIR = Path(__file__).parent
DATA_PATH = Path(os.getenv("QRMANAGER_DATA_DIR", str(Path.home() / ".qrcode_manager")))
DATABASE_PATH = DATA_PATH / "qrcodes.db"
DATABASE_URL = f"sqlite:///{DATABASE_PATH}"
LOG_PATH = DATA_PATH / "logs"

# Server Configuration
SERVER_HOST = "127.0.0.1"
SERVER_PORT = 8080
START_LOCAL_SERVER = os.getenv("QRMANAGER_START_SERVER", "1") != "0"

# Client Configuration
API_BASE_URL = os.getenv("QRMANAGER_API_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")
HTTP_TIMEOUT = None  # No client-side timeouts, failures surface from the transport
HOME_LOCATION = "/"
EDIT_LOCATION = "/api/qrcodes/edit"

# QR Codes
QR_IMAGE_SIZE = 350  # pixels, square
QR_DATA_MAX_LENGTH = 1000

# GUI Settings
WINDOW_WIDTH = 900
WINDOW_HEIGHT = 700

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
MAX_LOG_SIZE_MB = 10
LOG_BACKUP_COUNT = 5

def create_directories():
    """Create necessary directories if they don't exist"""
    directories = [
        DATA_PATH,
        LOG_PATH,
    ]
    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)
