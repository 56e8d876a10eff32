"""팬/줌 카메라

screen = world * zoom + pan
world  = (screen - pan) / zoom
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from src.core.dialogue_graph.models import Position


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass
class Camera:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def screen_to_world(self, p: Point) -> Point:
        return Point((p.x - self.pan_x) / self.zoom, (p.y - self.pan_y) / self.zoom)

    def world_to_screen(self, p: Point) -> Point:
        return Point(p.x * self.zoom + self.pan_x, p.y * self.zoom + self.pan_y)

    def pan_to(self, x: float, y: float) -> None:
        self.pan_x, self.pan_y = x, y

    def zoom_at(self, screen: Point, zoom: float) -> None:
        """screen 아래의 월드 점이 고정되도록 pan 재계산"""
        world = self.screen_to_world(screen)
        self.zoom = zoom
        self.pan_x = screen.x - world.x * zoom
        self.pan_y = screen.y - world.y * zoom

    def fit(
        self, bounds: Bounds, viewport_w: float, viewport_h: float, padding: float, max_zoom: float = 1.0
    ) -> None:
        """내용 전체가 뷰포트에 들어오도록. 확대는 max_zoom까지만."""
        content_w = bounds.width + padding * 2
        content_h = bounds.height + padding * 2
        self.zoom = min(viewport_w / content_w, viewport_h / content_h, max_zoom)
        self.pan_x = (viewport_w - content_w * self.zoom) / 2 - (bounds.min_x - padding) * self.zoom
        self.pan_y = (viewport_h - content_h * self.zoom) / 2 - (bounds.min_y - padding) * self.zoom

    def reset(self) -> None:
        self.zoom, self.pan_x, self.pan_y = 1.0, 0.0, 0.0

    @property
    def pan(self) -> Position:
        return Position(self.pan_x, self.pan_y)


def content_bounds(
    positions: Iterable[Position], width: float, height: float
) -> Optional[Bounds]:
    """노드 위치들의 외접 사각형. 노드가 없으면 None."""
    pts = list(positions)
    if not pts:
        return None
    return Bounds(
        min(p.x for p in pts),
        min(p.y for p in pts),
        max(p.x for p in pts) + width,
        max(p.y for p in pts) + height,
    )
