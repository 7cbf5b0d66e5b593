"""
Database operations for QR Code Manager
"""
from typing import Optional, List, Iterable
from datetime import datetime
from sqlalchemy.orm import Session
from database.models import User, QRCode, get_session

class RecordNotFoundError(Exception):
    """Requested row does not exist"""

class DatabaseOperations:
    """Handles all database operations"""

    def __init__(self, session_factory=get_session):
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def __enter__(self):
        self.session = self.session_factory()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            if exc_type is not None:
                self.session.rollback()
            self.session.close()

    # User operations
    def get_all_users(self) -> List[User]:
        """Get all users ordered by id"""
        return self.session.query(User).order_by(User.id).all()

    def create_user(self, name: str, email: str = None) -> User:
        """Add a new user"""
        user = User(name=name, email=email)
        self.session.add(user)
        self.session.commit()
        return user

    def get_user(self, user_id: int) -> User:
        """Get user by ID, raise if missing"""
        user = self.session.get(User, user_id)
        if user is None:
            raise RecordNotFoundError(f"User not found with id: {user_id}")
        return user

    def delete_user(self, user_id: int):
        """Delete a user, keeping its QR codes"""
        user = self.get_user(user_id)
        self.session.delete(user)
        self.session.commit()

    def get_users(self, user_ids: Iterable[int]) -> List[User]:
        """Get several users, raise on the first missing one"""
        return [self.get_user(user_id) for user_id in user_ids]

    # QRCode operations
    def get_all_qrcodes(self) -> List[QRCode]:
        """Get all QR codes ordered by id"""
        return self.session.query(QRCode).order_by(QRCode.id).all()

    def create_qrcode(self, content: str, user_ids: Iterable[int] = ()) -> QRCode:
        """Create a QR code owned by the given users"""
        qrcode = QRCode(content=content)
        qrcode.users = self.get_users(user_ids)
        self.session.add(qrcode)
        self.session.commit()
        return qrcode

    def get_qrcode(self, qrcode_id: int) -> QRCode:
        """Get QR code by ID, raise if missing"""
        qrcode = self.session.get(QRCode, qrcode_id)
        if qrcode is None:
            raise RecordNotFoundError(f"QRCode not found with id: {qrcode_id}")
        return qrcode

    def update_qrcode(self, qrcode_id: int, content: str,
                      user_ids: Optional[Iterable[int]] = None) -> QRCode:
        """Update QR code content; replace its owners when user_ids is given"""
        qrcode = self.get_qrcode(qrcode_id)
        qrcode.content = content
        qrcode.updated_at = datetime.utcnow()
        if user_ids is not None:
            qrcode.users = self.get_users(user_ids)
        self.session.commit()
        return qrcode

    def delete_qrcode(self, qrcode_id: int):
        """Delete a QR code"""
        qrcode = self.get_qrcode(qrcode_id)
        self.session.delete(qrcode)
        self.session.commit()

    def get_qrcodes_for_user(self, user_id: int) -> List[QRCode]:
        """Get the QR codes owned by a user, ordered by id"""
        user = self.get_user(user_id)
        return self.session.query(QRCode).filter(
            QRCode.users.contains(user)
        ).order_by(QRCode.id).all()

    def search_qrcodes(self, content: str) -> List[QRCode]:
        """Get QR codes whose content contains the given text"""
        return self.session.query(QRCode).filter(
            QRCode.content.contains(content, autoescape=True)
        ).order_by(QRCode.id).all()
