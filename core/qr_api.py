"""
REST client for the QR code backend
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import parse_qs, urlsplit

import httpx

import config
from core.join import Joined, JoinResult, join_all

logger = logging.getLogger(__name__)

class QRApiError(Exception):
    """Transport, status or payload failure while talking to the backend"""

@dataclass(frozen=True)
class QRRecord:
    """A QR code as served by the backend"""
    id: str
    data: str

    @classmethod
    def from_json(cls, payload: Any) -> "QRRecord":
        if not isinstance(payload, dict) or "id" not in payload or "data" not in payload:
            raise QRApiError(f"Malformed QR record: {payload!r}")
        return cls(id=str(payload["id"]), data=str(payload["data"]))

@dataclass(frozen=True)
class UserOption:
    """A selectable account"""
    id: str
    name: str

    @classmethod
    def from_json(cls, payload: Any) -> "UserOption":
        if not isinstance(payload, dict) or "id" not in payload:
            raise QRApiError(f"Malformed user: {payload!r}")
        name = payload.get("name") or f"User {payload['id']}"
        return cls(id=str(payload["id"]), name=str(name))

def join_ids(ids: Sequence[str]) -> str:
    """Comma-joined form of a selection, as the server expects it"""
    return ",".join(ids)

def edit_target(location: str) -> Optional[str]:
    """Return the `id` query parameter of a location, if present and non-empty"""
    query = parse_qs(urlsplit(location).query)
    values = query.get("id")
    return values[0] if values else None

def edit_location(qr_id: str) -> str:
    return f"{config.EDIT_LOCATION}?id={qr_id}"

def qrcode_path(qr_id: str) -> str:
    return f"/api/qrcodes/{qr_id}"

class QRCodeApi:
    """
    Async client for the QR code REST surface.

    Each public coroutine opens its own httpx.AsyncClient, so a QRCodeApi
    can be shared between worker threads that each run their own loop.
    """

    def __init__(self, base_url: str = None, transport: httpx.AsyncBaseTransport = None,
                 timeout: Optional[float] = config.HTTP_TIMEOUT):
        self.base_url = base_url or config.API_BASE_URL
        self.transport = transport
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            timeout=self.timeout,
        )

    async def _get_json(self, client: httpx.AsyncClient, path: str) -> Any:
        try:
            response = await client.get(path)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise QRApiError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise QRApiError(f"GET {path} returned invalid JSON: {e}") from e

    async def _list_for_user(self, client: httpx.AsyncClient, user_id: str) -> List[QRRecord]:
        payload = await self._get_json(client, f"/api/qrcodes/user/{user_id}")
        if not isinstance(payload, list):
            raise QRApiError(f"Expected a list of QR codes for user {user_id}, got {type(payload).__name__}")
        return [QRRecord.from_json(item) for item in payload]

    async def list_for_user(self, user_id: str) -> List[QRRecord]:
        """Get the QR codes of a single user"""
        async with self._client() as client:
            return await self._list_for_user(client, user_id)

    async def fetch_for_users(self, user_ids: Sequence[str]) -> "JoinResult[QRRecord]":
        """
        Fetch the QR codes of several users at once and merge them.

        One request per user, all in flight together. On success the lists
        are concatenated in the order of user_ids, keeping the server's order
        within each list and keeping duplicates. Any failing request fails
        the whole merge.
        """
        async with self._client() as client:
            result = await join_all([self._list_for_user(client, uid) for uid in user_ids])
        if isinstance(result, Joined):
            merged = list(itertools.chain.from_iterable(result.values))
            logger.debug(f"Merged {len(merged)} QR codes for {len(user_ids)} user(s)")
            return Joined(merged)
        return result

    async def get_qrcode(self, qr_id: str) -> QRRecord:
        """Get a single QR code"""
        async with self._client() as client:
            payload = await self._get_json(client, qrcode_path(qr_id))
        return QRRecord.from_json(payload)

    async def list_users(self) -> List[UserOption]:
        """Get the selectable accounts"""
        async with self._client() as client:
            payload = await self._get_json(client, "/api/users")
        if not isinstance(payload, list):
            raise QRApiError(f"Expected a list of users, got {type(payload).__name__}")
        return [UserOption.from_json(item) for item in payload]

    async def submit_form(self, method: str, action: str, fields: Dict[str, str]) -> int:
        """
        Send a form the way a browser would and return the status code.

        Bodiless methods carry no fields. Error statuses raise QRApiError.
        """
        method = method.upper()
        async with self._client() as client:
            try:
                if method in ("GET", "DELETE"):
                    response = await client.request(method, action)
                else:
                    response = await client.request(method, action, data=fields)
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise QRApiError(f"{method} {action} failed: {e}") from e
        logger.info(f"{method} {action} -> {response.status_code}")
        return response.status_code
