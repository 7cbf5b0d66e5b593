import pytest
from PyQt6.QtWidgets import QWidget

from core.qr_api import QRRecord
from gui.controller import REQUIRED_ELEMENTS, MissingElementError, QRPageController
from gui.qr_page import QRManagerPage

RECORDS = [QRRecord("1", "first"), QRRecord("2", "second"), QRRecord("3", "third")]


def rendered_data(controller):
    return [entry.data_label.text() for entry in controller.rendered_entries()]


def test_bind_lists_every_missing_element(api, navigator):
    controller = QRPageController(api, navigator)

    with pytest.raises(MissingElementError) as excinfo:
        controller.bind(QWidget())

    assert excinfo.value.missing == list(REQUIRED_ELEMENTS)
    assert "userSelect" in str(excinfo.value)


def test_bind_names_the_single_missing_element(qtbot, api, navigator):
    page = QRManagerPage()
    qtbot.addWidget(page)
    page.edit_data.setObjectName("")

    with pytest.raises(MissingElementError) as excinfo:
        QRPageController(api, navigator).bind(page)

    assert excinfo.value.missing == ["editData"]


def test_sections_start_hidden(page, controller):
    assert page.qrcode_section.isHidden()
    assert page.edit_section.isHidden()


def test_selection_fetches_and_renders_merged_list(qtbot, page, controller, backend, select):
    backend.delays["1"] = 0.1

    with qtbot.waitSignal(controller.list_rendered, timeout=5000) as blocker:
        select(page.user_select, 0, 1)

    assert blocker.args == [3]
    assert not page.qrcode_section.isHidden()
    assert page.selected_user_ids.text() == "1,2"
    assert rendered_data(controller) == ["alice-one", "alice-two", "bob-one"]


def test_selection_order_follows_option_order(qtbot, page, controller, select):
    with qtbot.waitSignal(controller.list_rendered, timeout=5000):
        select(page.user_select, 1, 0)

    assert controller.selected_user_ids_in_order() == ["1", "2"]
    assert rendered_data(controller) == ["alice-one", "alice-two", "bob-one"]


def test_empty_selection_hides_and_clears_without_fetching(qtbot, page, controller, backend, select):
    with qtbot.waitSignal(controller.list_rendered, timeout=5000):
        select(page.user_select, 0)
    requests_before = len(backend.list_requests)

    page.user_select.clearSelection()

    assert page.qrcode_section.isHidden()
    assert page.qrcode_list.count() == 0
    assert len(backend.list_requests) == requests_before


def test_failed_fetch_leaves_previous_list(qtbot, page, controller, backend, select):
    with qtbot.waitSignal(controller.list_rendered, timeout=5000):
        select(page.user_select, 0)
    backend.failing.add("2")

    with qtbot.waitSignal(controller.list_fetch_failed, timeout=5000):
        select(page.user_select, 0, 1)

    assert rendered_data(controller) == ["alice-one", "alice-two"]


def test_render_is_idempotent(page, controller):
    controller.render(RECORDS)
    controller.render(RECORDS)

    assert page.qrcode_list.count() == 3
    assert rendered_data(controller) == ["first", "second", "third"]


def test_render_empty_clears(page, controller):
    controller.render(RECORDS)
    controller.render([])
    assert page.qrcode_list.count() == 0


def test_rendered_entry_actions(page, controller, navigator):
    controller.render(RECORDS)
    entry = controller.rendered_entries()[1]

    entry.delete_button.click()
    assert navigator.submissions == [("DELETE", "/api/qrcodes/2", {})]

    assert entry.edit_href == "/api/qrcodes/edit?id=2"
    entry.edit_link.linkActivated.emit(entry.edit_href)
    assert navigator.locations == ["/api/qrcodes/edit?id=2"]


def test_payload_is_shown_as_plain_text(page, controller):
    controller.render([QRRecord("9", "<b>not bold</b>")])
    assert rendered_data(controller) == ["<b>not bold</b>"]


def test_edit_prefill_populates_form(qtbot, page, controller, backend):
    backend.records["42"] = {"id": 42, "data": "hello"}

    with qtbot.waitSignal(controller.edit_prefilled, timeout=5000):
        controller.load("/api/qrcodes/edit?id=42")

    assert not page.edit_section.isHidden()
    assert page.edit_data.text() == "hello"
    assert page.edit_user_ids.text() == ""
    assert page.edit_form.action == "/api/qrcodes/42"


def test_edit_prefill_uses_current_selection(qtbot, page, controller, backend, select):
    with qtbot.waitSignal(controller.list_rendered, timeout=5000):
        select(page.user_select, 0, 2)

    with qtbot.waitSignal(controller.edit_prefilled, timeout=5000):
        controller.load("/?id=21")

    assert page.edit_user_ids.text() == "1,3"


def test_edit_prefill_failure_keeps_section_hidden(qtbot, page, controller):
    with qtbot.waitSignal(controller.edit_prefill_failed, timeout=5000):
        controller.load("/api/qrcodes/edit?id=999")

    assert page.edit_section.isHidden()


def test_edit_prefill_with_unusable_id_fails_cleanly(qtbot, page, controller, backend):
    with qtbot.waitSignal(controller.edit_prefill_failed, timeout=5000):
        controller.load("/api/qrcodes/edit?id=%0A")

    assert page.edit_section.isHidden()
    assert backend.requests == []


def test_load_without_id_does_nothing(page, controller, backend):
    controller.load("/")
    assert backend.requests == []
    assert page.edit_section.isHidden()


def test_cancel_edit_hides_and_goes_home(qtbot, page, controller, navigator, backend):
    with qtbot.waitSignal(controller.edit_prefilled, timeout=5000):
        controller.load("/?id=11")

    page.findChild(QWidget, "cancelEditButton").click()

    assert page.edit_section.isHidden()
    assert navigator.locations == ["/"]


def test_edit_form_submits_to_record(qtbot, page, controller, navigator):
    with qtbot.waitSignal(controller.edit_prefilled, timeout=5000):
        controller.load("/?id=11")
    page.edit_data.setText("changed")

    page.edit_form.submit()

    assert navigator.submissions == [("PUT", "/api/qrcodes/11", {"data": "changed", "userIds": ""})]


def test_add_form_relays_selection_missed_by_change_handler(qtbot, page, controller, navigator, select):
    with qtbot.waitSignal(controller.list_rendered, timeout=5000):
        select(page.user_select, 0)

    page.user_select.blockSignals(True)
    select(page.user_select, 0, 2)
    page.user_select.blockSignals(False)
    assert page.selected_user_ids.text() == "1"

    page.add_data.setText("https://example.com")
    page.add_form.submit()

    assert page.selected_user_ids.text() == "1,3"
    assert navigator.submissions == [
        ("POST", "/api/qrcodes", {"data": "https://example.com", "userIds": "1,3"})
    ]


def test_unbound_controller_drops_late_results(page, controller):
    controller.render(RECORDS)
    controller.unbind()

    controller.render([])

    assert page.qrcode_list.count() == 3
