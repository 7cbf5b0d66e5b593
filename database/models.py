"""
Database models for QR Code Manager
"""
from sqlalchemy import create_engine, Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from datetime import datetime
import config

Base = declarative_base()

# Many-to-many link between users and the QR codes they own
user_qrcode = Table(
    'user_qrcode',
    Base.metadata,
    Column('qrcode_id', Integer, ForeignKey('qrcodes.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)

class User(Base):
    """An account that owns QR codes"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)

    qrcodes = relationship('QRCode', secondary=user_qrcode, back_populates='users')

class QRCode(Base):
    """Stored QR code content"""
    __tablename__ = 'qrcodes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    users = relationship('User', secondary=user_qrcode, back_populates='qrcodes')

_engine = None
_SessionLocal = None

# Database initialization
def init_database(url: str = None, **engine_kwargs):
    """Initialize the database and create all tables"""
    global _engine, _SessionLocal
    if url is None:
        config.create_directories()
        url = config.DATABASE_URL
    if url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
    _engine = create_engine(url, echo=False, **engine_kwargs)
    Base.metadata.create_all(_engine)
    _SessionLocal = sessionmaker(bind=_engine)
    return _engine

def get_session():
    """Get a database session"""
    if _SessionLocal is None:
        init_database()
    return _SessionLocal()
