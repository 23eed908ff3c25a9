"""Tests for the view state reducer."""

import pytest

from chainflow.core.view_state import (
    MAX_ZOOM,
    MIN_ZOOM,
    CloseDetail,
    FitToContainer,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    ResetView,
    SelectChain,
    SetViewMode,
    ToggleFullScreen,
    ViewMode,
    ViewState,
    Wheel,
    ZoomIn,
    ZoomOut,
    fit_zoom,
    reduce,
)


class TestPanning:
    """Drag to pan."""

    def test_drag_moves_pan_by_cursor_delta(self):
        state = reduce(ViewState(), PointerDown(100, 50))
        state = reduce(state, PointerMove(130, 20))

        assert state.is_panning
        assert state.pan == (30, -30)

    def test_drag_continues_from_previous_pan(self):
        state = ViewState(pan_x=10, pan_y=10)
        state = reduce(state, PointerDown(0, 0))
        state = reduce(state, PointerMove(5, 5))
        assert state.pan == (15, 15)

    def test_move_without_drag_is_ignored(self):
        state = ViewState()
        assert reduce(state, PointerMove(40, 40)) is state

    @pytest.mark.parametrize("event", [PointerUp(), PointerLeave()])
    def test_release_stops_panning(self, event):
        state = reduce(reduce(ViewState(), PointerDown(0, 0)), event)
        state_after = reduce(state, PointerMove(50, 50))

        assert not state.is_panning
        assert state_after.pan == (0, 0)

    def test_reducer_never_mutates_input(self):
        state = ViewState()
        reduce(state, PointerDown(1, 1))
        assert state == ViewState()


class TestZoom:
    """Wheel, buttons and clamping."""

    def test_wheel_up_zooms_in(self):
        assert reduce(ViewState(), Wheel(-120)).zoom == 110

    def test_wheel_down_zooms_out(self):
        assert reduce(ViewState(), Wheel(120)).zoom == 90

    def test_zero_wheel_is_ignored(self):
        assert reduce(ViewState(), Wheel(0)).zoom == 100

    def test_buttons(self):
        assert reduce(ViewState(), ZoomIn()).zoom == 110
        assert reduce(ViewState(), ZoomOut()).zoom == 90

    def test_clamped_at_bounds(self):
        assert reduce(ViewState(zoom=MAX_ZOOM), ZoomIn()).zoom == MAX_ZOOM
        assert reduce(ViewState(zoom=MIN_ZOOM), Wheel(1)).zoom == MIN_ZOOM
        assert reduce(ViewState(zoom=195), ZoomIn()).zoom == MAX_ZOOM

    def test_reset(self):
        state = ViewState(zoom=150, pan_x=40, pan_y=-20)
        state = reduce(state, ResetView())
        assert (state.zoom, state.pan) == (100, (0, 0))


class TestFit:
    """Fit to container."""

    def test_large_canvas_is_scaled_down(self):
        state = reduce(ViewState(pan_x=30), FitToContainer(800, 600, 1600, 600))

        assert state.zoom == 50
        assert state.pan == (0, 0)

    def test_small_canvas_is_never_enlarged(self):
        assert fit_zoom(800, 600, 200, 100) == 100

    def test_fit_is_clamped(self):
        assert fit_zoom(100, 100, 10000, 10000) == MIN_ZOOM

    def test_empty_canvas(self):
        assert fit_zoom(800, 600, 0, 0) == 100


class TestSelection:
    """Detail view and presentation switches."""

    def test_select_and_close(self):
        state = reduce(ViewState(), SelectChain("f2b-sshd"))
        assert state.selected_chain == "f2b-sshd"

        state = reduce(state, SelectChain("INPUT"))
        assert state.selected_chain == "INPUT"

        assert reduce(state, CloseDetail()).selected_chain is None

    def test_toggle_full_screen(self):
        state = reduce(ViewState(), ToggleFullScreen())
        assert state.is_full_screen
        assert not reduce(state, ToggleFullScreen()).is_full_screen

    def test_view_mode(self):
        assert reduce(ViewState(), SetViewMode(ViewMode.LIST)).view_mode == "list"

    def test_unknown_event_is_ignored(self):
        state = ViewState()
        assert reduce(state, object()) is state


class TestCoordinates:
    def test_screen_and_canvas_round_trip(self):
        state = ViewState(zoom=200, pan_x=10, pan_y=20)

        assert state.to_screen(5, 5) == (20, 30)
        assert state.to_canvas(20, 30) == (5, 5)
