import pytest

from gui.forms import FormWidget
from gui.main_window import MainWindow


@pytest.fixture
def window(qtbot, api):
    window = MainWindow(api)
    qtbot.addWidget(window)
    yield window
    window.retire_page()
    window.wait_for_jobs()


def test_navigate_builds_page_and_loads_users(qtbot, window):
    window.navigate("/")

    qtbot.waitUntil(lambda: window.page.user_select.count() == 3, timeout=5000)
    assert window.location == "/"
    assert window.page.edit_section.isHidden()


def test_navigate_to_edit_location_prefills(qtbot, window):
    window.navigate("/api/qrcodes/edit?id=12")

    qtbot.waitUntil(lambda: window.page.edit_data.text() == "alice-two", timeout=5000)
    assert not window.page.edit_section.isHidden()


def test_navigation_replaces_page(qtbot, window):
    window.navigate("/")
    first = window.page
    window.navigate("/")
    assert window.page is not first
    assert window.controller.bound


def test_successful_submit_returns_home(qtbot, window, backend):
    window.navigate("/api/qrcodes/edit?id=11")

    window.submit_form("DELETE", "/api/qrcodes/11", {})

    qtbot.waitUntil(lambda: window.location == "/", timeout=5000)
    assert ("DELETE", "/api/qrcodes/11") in backend.requests


def test_failed_submit_stays_on_page(qtbot, window):
    window.navigate("/api/qrcodes/edit?id=11")

    window.submit_form("DELETE", "/api/qrcodes/999", {})

    qtbot.waitUntil(lambda: "Request failed" in window.statusBar().currentMessage(), timeout=5000)
    assert window.location == "/api/qrcodes/edit?id=11"


def test_form_submitting_runs_before_serialization(qtbot):
    from PyQt6.QtWidgets import QLineEdit

    form = FormWidget("POST", "/api/qrcodes")
    qtbot.addWidget(form)
    field = form.add_field("userIds", QLineEdit())
    form.submitting.connect(lambda: field.setText("late"))
    seen = []
    form.submitted.connect(lambda method, action, fields: seen.append((method, action, fields)))

    form.submit()

    assert seen == [("POST", "/api/qrcodes", {"userIds": "late"})]
