"""
FastAPI server exposing the QR code REST API
"""
from fastapi import FastAPI, HTTPException, Form, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote
import logging
import config
from database.models import QRCode, User
from database.operations import DatabaseOperations, RecordNotFoundError
from server.qr_generator import QRCodeGenerator

logger = logging.getLogger(__name__)

app = FastAPI(title=f"{config.APP_NAME} API", version=config.APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

qr_generator = QRCodeGenerator()

# Models
class UserCreate(BaseModel):
    name: str
    email: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None

class QRCodeCreate(BaseModel):
    data: str

class QRCodeResponse(BaseModel):
    id: int
    data: str
    imageUrl: str
    createdAt: Optional[datetime] = None

async def get_db():
    """Database operations for one request"""
    with DatabaseOperations() as db:
        yield db

def to_user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email)

def to_qrcode_response(qrcode: QRCode) -> QRCodeResponse:
    return QRCodeResponse(
        id=qrcode.id,
        data=qrcode.content,
        imageUrl=f"/api/qrcodes/generate?text={quote(qrcode.content)}",
        createdAt=qrcode.created_at,
    )

def validate_data(data: str) -> str:
    """QR code content must be non-blank and fit the column"""
    if not data or not data.strip():
        raise HTTPException(status_code=400, detail="Data cannot be blank")
    if len(data) > config.QR_DATA_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Data must be less than {config.QR_DATA_MAX_LENGTH} characters"
        )
    return data

def parse_user_ids(raw: Optional[str]) -> List[int]:
    """Parse a comma-joined list of user ids"""
    if not raw:
        return []
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid user ids: {raw}")

@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path}: invalid request: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": config.APP_VERSION}

# Users
@app.get("/api/users", response_model=List[UserResponse])
async def list_users(db: DatabaseOperations = Depends(get_db)):
    """Get all users"""
    return [to_user_response(u) for u in db.get_all_users()]

@app.post("/api/users", response_model=UserResponse, status_code=201)
async def create_user(user: UserCreate, db: DatabaseOperations = Depends(get_db)):
    """Create a user"""
    if not user.name.strip():
        raise HTTPException(status_code=400, detail="Name cannot be blank")
    created = db.create_user(user.name, user.email)
    logger.info(f"Created user {created.id}")
    return to_user_response(created)

@app.get("/api/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: DatabaseOperations = Depends(get_db)):
    """Get a user"""
    return to_user_response(db.get_user(user_id))

@app.delete("/api/users/{user_id}", status_code=204)
async def delete_user(user_id: int, db: DatabaseOperations = Depends(get_db)):
    """Delete a user"""
    db.delete_user(user_id)
    logger.info(f"Deleted user {user_id}")
    return Response(status_code=204)

# QR codes
@app.get("/api/qrcodes", response_model=List[QRCodeResponse])
async def list_qrcodes(db: DatabaseOperations = Depends(get_db)):
    """Get all QR codes"""
    logger.info("Fetching all QR codes")
    return [to_qrcode_response(q) for q in db.get_all_qrcodes()]

@app.post("/api/qrcodes", response_model=QRCodeResponse, status_code=201)
async def create_qrcode(
    data: str = Form(...),
    userIds: Optional[str] = Form(None),
    userId: Optional[int] = None,
    db: DatabaseOperations = Depends(get_db)
):
    """Create a QR code, optionally owned by the given users"""
    user_ids = parse_user_ids(userIds)
    if userId is not None and userId not in user_ids:
        user_ids.append(userId)
    created = db.create_qrcode(validate_data(data), user_ids)
    logger.info(f"Created QR code {created.id} for users {user_ids}")
    return to_qrcode_response(created)

@app.get("/api/qrcodes/generate")
async def generate_qrcode(text: str):
    """Generate QR code image"""
    if not text:
        raise HTTPException(status_code=400, detail="Text cannot be empty")
    logger.info(f"Generating QR code for text: {text}")
    try:
        png = qr_generator.generate_png(text)
    except Exception as e:
        logger.error(f"Error generating QR code: {e}")
        raise HTTPException(status_code=500, detail="Error generating QR code image")
    return Response(content=png, media_type="image/png")

@app.get("/api/qrcodes/search", response_model=List[QRCodeResponse])
async def search_qrcodes(content: str, clearCache: bool = False, db: DatabaseOperations = Depends(get_db)):
    """Search QR codes by content. Results are not cached, so clearCache has no effect."""
    logger.info(f"Searching QR codes with content: {content} (clearCache={clearCache})")
    return [to_qrcode_response(q) for q in db.search_qrcodes(content)]

@app.get("/api/qrcodes/user/{user_id}", response_model=List[QRCodeResponse])
async def list_user_qrcodes(user_id: int, db: DatabaseOperations = Depends(get_db)):
    """Get QR codes by user"""
    logger.info(f"Fetching QR codes for user ID: {user_id}")
    return [to_qrcode_response(q) for q in db.get_qrcodes_for_user(user_id)]

@app.post("/api/qrcodes/user/{user_id}/qrcodes", response_model=QRCodeResponse, status_code=201)
async def add_qrcode_to_user(user_id: int, request: QRCodeCreate,
                             db: DatabaseOperations = Depends(get_db)):
    """Add QR code to user"""
    logger.info(f"Adding QR code to user ID: {user_id}")
    created = db.create_qrcode(validate_data(request.data), [user_id])
    return to_qrcode_response(created)

@app.get("/api/qrcodes/{qrcode_id}", response_model=QRCodeResponse)
async def get_qrcode(qrcode_id: int, db: DatabaseOperations = Depends(get_db)):
    """Get QR code by ID"""
    logger.info(f"Fetching QR code with ID: {qrcode_id}")
    return to_qrcode_response(db.get_qrcode(qrcode_id))

@app.put("/api/qrcodes/{qrcode_id}", response_model=QRCodeResponse)
async def update_qrcode(
    qrcode_id: int,
    data: str = Form(...),
    userIds: Optional[str] = Form(None),
    db: DatabaseOperations = Depends(get_db)
):
    """Update QR code; a non-empty userIds replaces its owners"""
    logger.info(f"Updating QR code with ID: {qrcode_id}")
    user_ids = parse_user_ids(userIds) or None
    updated = db.update_qrcode(qrcode_id, validate_data(data), user_ids)
    return to_qrcode_response(updated)

@app.delete("/api/qrcodes/{qrcode_id}", status_code=204)
async def delete_qrcode(qrcode_id: int, db: DatabaseOperations = Depends(get_db)):
    """Delete QR code"""
    logger.info(f"Deleting QR code with ID: {qrcode_id}")
    db.delete_qrcode(qrcode_id)
    return Response(status_code=204)
