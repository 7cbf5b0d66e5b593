"""
Main entry point for QR Code Manager
"""
import sys
import logging
from logging.handlers import RotatingFileHandler
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import QTimer

# Import application modules
import config
from database.models import init_database
from gui.main_window import MainWindow

def setup_logging():
    """Setup application logging"""
    config.LOG_PATH.mkdir(parents=True, exist_ok=True)
    log_file = config.LOG_PATH / "app.log"

    # Create formatters
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    # File handler
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=config.MAX_LOG_SIZE_MB * 1024 * 1024,
        backupCount=config.LOG_BACKUP_COUNT
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.LOG_LEVEL)
    console_handler.setFormatter(console_formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Suppress some noisy loggers
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

def main():
    """Main application entry point"""
    try:
        # Setup logging
        setup_logging()
        logger = logging.getLogger(__name__)
        logger.info("="*60)
        logger.info(f"Starting {config.APP_NAME} v{config.APP_VERSION}")
        logger.info("="*60)

        # Create necessary directories
        config.create_directories()

        # Create Qt application
        app = QApplication(sys.argv)
        app.setApplicationName(config.APP_NAME)
        app.setOrganizationName(config.APP_NAME)
        app.setStyle('Fusion')

        # Start location, e.g. "/api/qrcodes/edit?id=42"
        args = app.arguments()[1:]
        start_location = args[0] if args else config.HOME_LOCATION

        logger.info("Creating main window...")
        window = MainWindow()

        if config.START_LOCAL_SERVER:
            logger.info("Initializing database...")
            init_database()
            window.start_web_server()
            # Give the server a moment to bind before the first requests
            QTimer.singleShot(1000, lambda: window.navigate(start_location))
        else:
            window.navigate(start_location)
        window.show()

        logger.info("Application started successfully")

        # Run application
        sys.exit(app.exec())

    except Exception as e:
        logger = logging.getLogger(__name__)
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    main()
