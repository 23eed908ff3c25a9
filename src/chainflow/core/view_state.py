"""Interactive view state of the chain-flow diagram.

The state is an immutable value and every UI event is a small immutable
message. ``reduce(state, event)`` returns the next state without touching
the previous one, so any rendering surface (browser, terminal, test) can
drive it and replay it.

Transitions:
    PointerDown -> start panning, remember the anchor
    PointerMove -> follow the cursor while panning
    PointerUp / PointerLeave -> stop panning
    Wheel / ZoomIn / ZoomOut -> zoom by a fixed step, clamped to [25, 200]
    FitToContainer -> scale the whole canvas into the viewport (<= 100%)
    ResetView -> zoom 100%, pan at origin
    SelectChain -> open the detail view of a chain (node or relation tag)
    CloseDetail -> clear the selection
    ToggleFullScreen / SetViewMode -> presentation switches
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from loguru import logger

MIN_ZOOM = 25
MAX_ZOOM = 200
DEFAULT_ZOOM = 100
ZOOM_STEP = 10


class ViewMode(StrEnum):
    DIAGRAM = "diagram"
    TREE = "tree"
    LIST = "list"


@dataclass(frozen=True)
class ViewState:
    """Everything that changes what is drawn without changing the graph."""

    zoom: float = DEFAULT_ZOOM
    pan_x: float = 0.0
    pan_y: float = 0.0
    is_panning: bool = False
    # Cursor position minus pan when the drag started
    anchor_x: float = 0.0
    anchor_y: float = 0.0
    selected_chain: str | None = None
    is_full_screen: bool = False
    view_mode: ViewMode = ViewMode.DIAGRAM

    @property
    def scale(self) -> float:
        return self.zoom / 100

    @property
    def pan(self) -> tuple[float, float]:
        return (self.pan_x, self.pan_y)

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        """Map canvas coordinates to screen coordinates."""
        return (x * self.scale + self.pan_x, y * self.scale + self.pan_y)

    def to_canvas(self, x: float, y: float) -> tuple[float, float]:
        """Map screen coordinates back to canvas coordinates."""
        return ((x - self.pan_x) / self.scale, (y - self.pan_y) / self.scale)


# ── Events ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class Wheel:
    """One wheel tick; negative ``delta_y`` scrolls up and zooms in."""

    delta_y: float


@dataclass(frozen=True)
class ZoomIn:
    pass


@dataclass(frozen=True)
class ZoomOut:
    pass


@dataclass(frozen=True)
class FitToContainer:
    container_width: float
    container_height: float
    canvas_width: float
    canvas_height: float


@dataclass(frozen=True)
class ResetView:
    pass


@dataclass(frozen=True)
class SelectChain:
    """Click on a node or on a relation tag in the detail view."""

    chain: str


@dataclass(frozen=True)
class CloseDetail:
    pass


@dataclass(frozen=True)
class ToggleFullScreen:
    pass


@dataclass(frozen=True)
class SetViewMode:
    mode: ViewMode


ViewEvent = (
    PointerDown
    | PointerMove
    | PointerUp
    | PointerLeave
    | Wheel
    | ZoomIn
    | ZoomOut
    | FitToContainer
    | ResetView
    | SelectChain
    | CloseDetail
    | ToggleFullScreen
    | SetViewMode
)


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def fit_zoom(
    container_width: float,
    container_height: float,
    canvas_width: float,
    canvas_height: float,
) -> float:
    """Zoom percent that makes the canvas fit the container, at most 100."""
    if canvas_width <= 0 or canvas_height <= 0:
        return DEFAULT_ZOOM
    scale = min(
        container_width / canvas_width, container_height / canvas_height, 1.0
    )
    return clamp_zoom(scale * 100)


def reduce(state: ViewState, event: ViewEvent) -> ViewState:
    """Return the state following ``event``.

    Unknown events leave the state unchanged.
    """
    if isinstance(event, PointerDown):
        return replace(
            state,
            is_panning=True,
            anchor_x=event.x - state.pan_x,
            anchor_y=event.y - state.pan_y,
        )

    if isinstance(event, PointerMove):
        if not state.is_panning:
            return state
        return replace(
            state, pan_x=event.x - state.anchor_x, pan_y=event.y - state.anchor_y
        )

    if isinstance(event, PointerUp | PointerLeave):
        if not state.is_panning:
            return state
        return replace(state, is_panning=False)

    if isinstance(event, Wheel):
        if event.delta_y == 0:
            return state
        step = ZOOM_STEP if event.delta_y < 0 else -ZOOM_STEP
        return replace(state, zoom=clamp_zoom(state.zoom + step))

    if isinstance(event, ZoomIn):
        return replace(state, zoom=clamp_zoom(state.zoom + ZOOM_STEP))

    if isinstance(event, ZoomOut):
        return replace(state, zoom=clamp_zoom(state.zoom - ZOOM_STEP))

    if isinstance(event, FitToContainer):
        zoom = fit_zoom(
            event.container_width,
            event.container_height,
            event.canvas_width,
            event.canvas_height,
        )
        return replace(state, zoom=zoom, pan_x=0.0, pan_y=0.0)

    if isinstance(event, ResetView):
        return replace(state, zoom=DEFAULT_ZOOM, pan_x=0.0, pan_y=0.0)

    if isinstance(event, SelectChain):
        return replace(state, selected_chain=event.chain)

    if isinstance(event, CloseDetail):
        return replace(state, selected_chain=None)

    if isinstance(event, ToggleFullScreen):
        return replace(state, is_full_screen=not state.is_full_screen)

    if isinstance(event, SetViewMode):
        return replace(state, view_mode=ViewMode(event.mode))

    logger.debug(f"Ignoring unknown view event: {event!r}")
    return state
