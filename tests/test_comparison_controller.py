import threading

import pytest
from PIL import Image

from visidiff.controllers.comparison_controller import ComparisonController
from visidiff.models.session_model import PresentationState, ViewMode
from visidiff.models.view_model import DeletedView, DiffView, NewFileView, OnionSkinView, SideBySideView


@pytest.fixture
def controller():
    c = ComparisonController(viewport=(64, 48))
    yield c
    c.close()


def test_load_pair_from_bytes(controller, png_bytes):
    state = controller.load_pair(png_bytes(4, 3, (0, 0, 0, 255)), png_bytes(4, 3, (255, 255, 255, 255)))

    assert state is PresentationState.COMPARING
    assert controller.previous_info.format == "PNG"
    assert controller.current_info.image.size == (4, 3)
    assert isinstance(controller.view(), OnionSkinView)


@pytest.mark.parametrize(
    "previous, current, expected, view_type",
    [
        (False, True, PresentationState.NEW_FILE, NewFileView),
        (True, False, PresentationState.DELETED, DeletedView),
    ],
)
def test_absent_side(controller, png_bytes, previous, current, expected, view_type):
    raw = png_bytes(2, 2)
    state = controller.load_pair(raw if previous else None, raw if current else None)

    assert state is expected
    assert isinstance(controller.view(), view_type)
    assert controller.notices == []


def test_decode_failure_degrades_to_absent(controller, png_bytes):
    state = controller.load_pair(b"definitely not an image", png_bytes(2, 2))

    assert state is PresentationState.NEW_FILE
    assert len(controller.notices) == 1


def test_both_sides_undecodable_is_empty(controller):
    assert controller.load_pair(b"", b"\x89PNG broken") is PresentationState.EMPTY
    assert len(controller.notices) == 2


def test_oversized_images_degrade_to_absent(controller, png_bytes, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    raw = png_bytes(64, 64)

    assert controller.load_pair(raw, raw) is PresentationState.EMPTY
    assert len(controller.notices) == 2


def test_load_files_missing_file_is_absent(controller, tmp_path, png_bytes):
    current = tmp_path / "logo.png"
    current.write_bytes(png_bytes(5, 5))

    state = controller.load_files(tmp_path / "missing.png", current)

    assert state is PresentationState.NEW_FILE
    assert controller.current_info.path == current
    assert controller.notices == []


def test_diff_computed_only_in_diff_mode(controller, solid):
    controller.set_images(solid(4, 4, (0, 0, 0, 255)), solid(4, 4, (255, 255, 255, 255)))

    controller.view()
    assert controller.diff_result is None

    controller.set_view_mode(ViewMode.DIFF)
    view = controller.view()

    assert isinstance(view, DiffView)
    assert view.result.changed_pixel_count == 16
    assert controller.diff_summary() is not None


def test_diff_reused_until_inputs_change(controller, solid):
    controller.set_images(solid(4, 4, (100, 100, 100, 255)), solid(4, 4, (105, 105, 105, 255)))
    controller.set_view_mode(ViewMode.DIFF)
    first = controller.view().result

    controller.set_view_mode(ViewMode.SIDE_BY_SIDE)
    controller.set_view_mode(ViewMode.DIFF)
    assert controller.view().result is first

    controller.set_sensitivity(2)
    second = controller.view().result
    assert second is not first
    assert (first.changed_pixel_count, second.changed_pixel_count) == (0, 16)


def test_same_sensitivity_keeps_result(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.set_view_mode(ViewMode.DIFF)
    first = controller.view().result

    controller.set_sensitivity(10)

    assert controller.view().result is first


def test_new_pair_invalidates_diff(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.set_view_mode(ViewMode.DIFF)
    controller.view()

    controller.set_images(solid(3, 3, (0, 0, 0, 255)), solid(3, 3, (255, 255, 255, 255)))

    assert controller.diff_result is None
    assert controller.session.view_mode is ViewMode.ONION_SKIN


def test_mode_switch_preserves_controls(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.set_opacity(35)
    controller.zoom_in()
    controller.set_sensitivity(20)

    controller.set_view_mode(ViewMode.SIDE_BY_SIDE)
    assert isinstance(controller.view(), SideBySideView)
    controller.set_view_mode(ViewMode.ONION_SKIN)

    view = controller.view()
    assert (view.opacity, view.zoom) == (35, 125)
    assert controller.session.sensitivity == 20


def test_drag_pan_uses_gesture_anchor(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.session.set_pan(5, 5)

    controller.begin_pan()
    controller.drag_pan(3, 0)
    controller.drag_pan(10, -4)
    controller.end_pan()
    controller.drag_pan(100, 100)

    assert controller.session.pan == (15.0, 1.0)


def test_pan_ignored_outside_onion_skin(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.set_view_mode(ViewMode.DIFF)

    controller.begin_pan()
    controller.drag_pan(10, 10)

    assert controller.session.pan == (0.0, 0.0)


def test_fit_and_actual_size(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.zoom_in()
    controller.session.set_pan(4, 4)

    controller.actual_size()
    assert (controller.session.zoom, controller.session.pan) == (100, (4.0, 4.0))

    controller.zoom_out()
    controller.fit()
    assert (controller.session.zoom, controller.session.pan) == (100, (0.0, 0.0))


def test_stale_async_result_is_dropped(controller, solid):
    controller.set_images(solid(2, 2), solid(2, 2))
    controller.set_view_mode(ViewMode.DIFF)
    controller.view()
    current = controller.diff_result

    stale_id = controller._pipeline.latest_request_id
    controller.set_sensitivity(0)

    assert controller.apply_diff_result(stale_id, current) is False
    assert controller.diff_result is None


def test_async_diff_reports_pending_then_result(solid):
    ready = threading.Event()
    controller = ComparisonController(async_diff=True, on_diff_ready=ready.set)
    try:
        controller.set_images(solid(3, 3, (0, 0, 0, 255)), solid(3, 3, (255, 255, 255, 255)))
        controller.set_view_mode(ViewMode.DIFF)

        first = controller.view()
        assert isinstance(first, DiffView)

        assert ready.wait(timeout=5)
        view = controller.view()
        assert not view.is_pending
        assert view.result.changed_pixel_count == 9
    finally:
        controller.close()


def test_result_written_after_input_change_is_not_shown(controller, solid, monkeypatch):
    controller.set_images(solid(2, 2, (100, 100, 100, 255)), solid(2, 2, (105, 105, 105, 255)))
    controller.set_view_mode(ViewMode.DIFF)
    old = controller.view().result
    old_id = controller._pipeline.latest_request_id
    pipeline = controller._pipeline
    is_current = pipeline.is_current

    def check_then_change_input(request_id):
        # the user moves the slider right after the currency check passes
        answer = is_current(request_id)
        monkeypatch.setattr(pipeline, "is_current", is_current)
        controller.set_sensitivity(2)
        return answer

    monkeypatch.setattr(pipeline, "is_current", check_then_change_input)
    controller.apply_diff_result(old_id, old)

    view = controller.view()
    assert view.sensitivity == 2
    assert view.result.changed_pixel_count == 4


def test_async_result_is_applied_through_schedule(solid):
    scheduled = []
    controller = ComparisonController(async_diff=True, schedule=scheduled.append)
    controller.set_images(solid(3, 3, (0, 0, 0, 255)), solid(3, 3, (255, 255, 255, 255)))
    controller.set_view_mode(ViewMode.DIFF)

    assert controller.view().is_pending
    controller.close()

    assert controller.diff_result is None
    assert len(scheduled) == 1
    scheduled[0]()
    assert controller.view().result.changed_pixel_count == 9


def test_failed_async_diff_is_reported_not_pending(solid, monkeypatch):
    scheduled = []
    controller = ComparisonController(async_diff=True, schedule=scheduled.append)
    diff_service = controller._pipeline._diff_service

    def out_of_memory(*args):
        raise MemoryError("pair too large")

    monkeypatch.setattr(diff_service, "compute_pixel_diff", out_of_memory)
    controller.set_images(solid(3, 3), solid(3, 3))
    controller.set_view_mode(ViewMode.DIFF)
    controller.view()
    controller.close()

    assert len(scheduled) == 1
    scheduled[0]()

    view = controller.view()
    assert view.error is not None
    assert not view.is_pending
    assert controller._inflight_id is None
    assert len(controller.notices) == 1

    # no automatic retry until the inputs change
    controller.close()
    assert len(scheduled) == 1

    monkeypatch.undo()
    controller.set_sensitivity(0)
    assert controller.view().is_pending
    controller.close()
    scheduled[-1]()
    assert controller.view().result.changed_pixel_count == 0
