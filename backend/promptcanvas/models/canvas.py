"""Canvas input models: drawn elements and the images placed on the canvas.

Element fields mirror the drawing library's JSON so a scene export can be
validated as-is. The engine only reads these; it never mutates them.
"""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import Field, field_validator

from promptcanvas.models.base import CamelModel
from promptcanvas.utils.geometry import Box, Point, box_center


class ShapeKind(str, enum.Enum):
    ARROW = "arrow"
    TEXT = "text"
    ELLIPSE = "ellipse"
    RECTANGLE = "rectangle"
    IMAGE = "image"
    FRAME = "frame"
    OTHER = "other"


# Containers hold annotations; they are never annotations themselves.
CONTAINER_KINDS = frozenset({ShapeKind.IMAGE, ShapeKind.FRAME})


class BoundElement(CamelModel):
    id: str
    type: str = ""


class ArrowBinding(CamelModel):
    element_id: str


class CanvasElement(CamelModel):
    id: str
    # Raw type string; unrecognized values are kept and classify as unknown.
    type: str = ShapeKind.OTHER.value
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    text: str | None = None
    stroke_color: str | None = None
    bound_elements: list[BoundElement | None] | None = None
    start_binding: ArrowBinding | None = None
    end_binding: ArrowBinding | None = None
    is_deleted: bool = False

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def _missing_geometry_is_zero(cls, v: object) -> object:
        return 0.0 if v is None else v

    @property
    def kind(self) -> ShapeKind:
        try:
            return ShapeKind(self.type)
        except ValueError:
            return ShapeKind.OTHER

    @property
    def box(self) -> Box:
        return (self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Point:
        return box_center(self.box)


class Dimensions(CamelModel):
    width: float | None = None
    height: float | None = None
    depth: float | None = None
    unit: Literal["cm", "in", "m"] | None = None


class ProductMetadata(CamelModel):
    category: str | None = None  # furniture, electronics, decor, ...
    subcategory: str | None = None  # sofa, laptop, vase, ...
    materials: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    style: str | None = None  # modern, vintage, minimalist, ...
    dimensions: Dimensions | None = None
    features: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class EnvironmentContext(CamelModel):
    type: str | None = None  # living room, outdoor, studio
    lighting: str | None = None
    ambiance: str | None = None  # cozy, professional, dramatic
    time_of_day: str | None = None
    weather: str | None = None


ImageType = Literal["environment", "product", "generated", "asset"]


class ImageMetadata(CamelModel):
    """An image placed on the canvas, linked to its element by id."""

    id: str
    type: ImageType = "product"
    excalidraw_element_id: str
    name: str | None = None
    data_url: str | None = None
    high_res_data_url: str | None = None
    width: float = 0.0
    height: float = 0.0
    provider: str | None = None
    model: str | None = None
    product_metadata: ProductMetadata | None = None
