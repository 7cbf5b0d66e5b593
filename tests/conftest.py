import asyncio
import os
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("QRMANAGER_DATA_DIR", tempfile.mkdtemp(prefix="qrmanager-tests-"))
os.environ.setdefault("QRMANAGER_START_SERVER", "0")

import httpx
import pytest
from PyQt6.QtCore import QItemSelection, QItemSelectionModel
from sqlalchemy.pool import StaticPool

from core.qr_api import QRCodeApi, UserOption


@pytest.fixture(autouse=True)
def _ensure_qapp(qapp):
    """Make sure a QApplication exists for tests that build widgets without qtbot"""
    return qapp


class FakeBackend:
    """In-process stand-in for the REST backend, served through httpx.MockTransport"""

    def __init__(self):
        self.users = [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}, {"id": 3, "name": "Carol"}]
        self.codes = {}  # user id -> list of records
        self.records = {}  # qr id -> record
        self.delays = {}  # user id -> seconds
        self.failing = set()  # user ids answered with 500
        self.not_json = set()  # user ids answered with an HTML body
        self.requests = []  # (method, path)

    def add_code(self, user_id, qr_id, data):
        record = {"id": qr_id, "data": data, "imageUrl": f"/img/{qr_id}"}
        self.codes.setdefault(str(user_id), []).append(record)
        self.records[str(qr_id)] = record
        return record

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if path.startswith("/api/qrcodes/user/"):
            user_id = path.rsplit("/", 1)[1]
            await asyncio.sleep(self.delays.get(user_id, 0))
            if user_id in self.failing:
                return httpx.Response(500, json={"detail": "boom"})
            if user_id in self.not_json:
                return httpx.Response(200, text="<html>oops</html>")
            return httpx.Response(200, json=self.codes.get(user_id, []))

        if path == "/api/users":
            return httpx.Response(200, json=self.users)

        if path.startswith("/api/qrcodes/"):
            qr_id = path.rsplit("/", 1)[1]
            if qr_id not in self.records:
                return httpx.Response(404, json={"detail": f"QRCode not found with id: {qr_id}"})
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json=self.records[qr_id])

        if path == "/api/qrcodes" and request.method == "POST":
            return httpx.Response(201, json={"id": 100, "data": "created"})

        return httpx.Response(404, json={"detail": "Not Found"})

    @property
    def list_requests(self):
        return [path for method, path in self.requests if path.startswith("/api/qrcodes/user/")]


class FakeNavigator:
    """Records what the page asks the browser to do"""

    def __init__(self):
        self.locations = []
        self.submissions = []

    def navigate(self, location):
        self.locations.append(location)

    def submit_form(self, method, action, fields):
        self.submissions.append((method, action, dict(fields)))


@pytest.fixture
def backend():
    backend = FakeBackend()
    backend.add_code(1, 11, "alice-one")
    backend.add_code(1, 12, "alice-two")
    backend.add_code(2, 21, "bob-one")
    return backend


@pytest.fixture
def api(backend):
    return QRCodeApi(base_url="http://testserver", transport=httpx.MockTransport(backend.handle))


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def page(qtbot, backend):
    from gui.qr_page import QRManagerPage

    page = QRManagerPage()
    qtbot.addWidget(page)
    page.set_users([UserOption(str(u["id"]), u["name"]) for u in backend.users])
    return page


@pytest.fixture
def controller(page, api, navigator):
    from gui.controller import QRPageController

    controller = QRPageController(api, navigator)
    controller.bind(page)
    yield controller
    controller.wait_for_threads()


def select_rows(list_widget, *rows):
    """Select rows in one step so a single selection change is emitted"""
    selection = QItemSelection()
    for row in rows:
        index = list_widget.model().index(row, 0)
        selection.select(index, index)
    list_widget.selectionModel().select(selection, QItemSelectionModel.SelectionFlag.ClearAndSelect)


@pytest.fixture
def database():
    from database.models import init_database

    return init_database("sqlite://", poolclass=StaticPool)


@pytest.fixture
def client(database):
    from fastapi.testclient import TestClient
    from server.app import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def select():
    return select_rows
