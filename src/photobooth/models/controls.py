"""
Editor Control Models
=====================

This module defines the user-driven editor controls.

Control Vector:
    The kiosk exposes four sliders plus a (not yet wired) pan offset:

    controls = {
        zoom,        # uniform scale on top of the fit-scale, > 0
        rotate,      # degrees, clockwise on screen
        pan_x/pan_y, # reserved, placement is always centered
        brightness,  # channel multiplier, 1 = unchanged
        contrast,    # gain around mid-gray (128), 1 = unchanged
    }

Validation:
    Non-finite values and zoom <= 0 are rejected with InvalidControlState
    before any drawing happens.

Example:
    from photobooth.models.controls import build_controls

    controls = build_controls(zoom=1.5, rotate=90)
    controls = controls.merged(brightness=1.2)
"""

import math
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from photobooth.errors import InvalidControlState


class TransformState(BaseModel):
    """
    Geometric placement of the source on the canvas.

    Attributes:
        zoom: Uniform scale applied on top of the fit-scale
        rotate_degrees: Rotation about the canvas midpoint
        pan_x: Horizontal offset (reserved, ignored by placement)
        pan_y: Vertical offset (reserved, ignored by placement)
    """

    model_config = ConfigDict(frozen=True)

    zoom: float = Field(default=1.0, gt=0, allow_inf_nan=False)
    rotate_degrees: float = Field(default=0.0, allow_inf_nan=False)
    pan_x: float = Field(default=0.0, allow_inf_nan=False)
    pan_y: float = Field(default=0.0, allow_inf_nan=False)


class ToneState(BaseModel):
    """Brightness/contrast pair applied after placement."""

    model_config = ConfigDict(frozen=True)

    brightness: float = Field(default=1.0, allow_inf_nan=False)
    contrast: float = Field(default=1.0, allow_inf_nan=False)

    @property
    def is_identity(self) -> bool:
        """True when applying this tone would change nothing."""
        return self.brightness == 1 and self.contrast == 1


class EditorControls(BaseModel):
    """
    Full control set for one compose cycle.

    Immutable: a control change produces a new instance via merged().
    """

    model_config = ConfigDict(frozen=True)

    zoom: float = Field(
        default=1.0,
        gt=0,
        allow_inf_nan=False,
        description="Uniform zoom on top of the fit-scale",
    )
    rotate: float = Field(
        default=0.0,
        allow_inf_nan=False,
        description="Rotation in degrees, clockwise on screen",
    )
    pan_x: float = Field(default=0.0, allow_inf_nan=False)
    pan_y: float = Field(default=0.0, allow_inf_nan=False)
    brightness: float = Field(
        default=1.0,
        allow_inf_nan=False,
        description="Per-channel multiplier",
    )
    contrast: float = Field(
        default=1.0,
        allow_inf_nan=False,
        description="Gain around mid-gray (128)",
    )

    @property
    def transform(self) -> TransformState:
        return TransformState(
            zoom=self.zoom,
            rotate_degrees=self.rotate,
            pan_x=self.pan_x,
            pan_y=self.pan_y,
        )

    @property
    def tone(self) -> ToneState:
        return ToneState(brightness=self.brightness, contrast=self.contrast)

    def merged(self, **changes: Optional[float]) -> "EditorControls":
        """
        Return a copy with the given controls replaced.

        None values are ignored so partial slider updates can be
        passed straight through.

        Raises:
            InvalidControlState: If the merged controls are invalid
        """
        data = self.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})
        return build_controls(data)


def build_controls(data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> EditorControls:
    """
    Validate raw control values into EditorControls.

    Raises:
        InvalidControlState: On unknown types, non-finite values or zoom <= 0
    """
    values = dict(data or {})
    values.update(kwargs)
    try:
        return EditorControls.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidControlState(f"Invalid editor controls: {problems}") from e


def ensure_valid(controls: EditorControls) -> EditorControls:
    """
    Re-check invariants on an existing controls object.

    Guards against instances built with model_construct(), which
    skips validation.
    """
    for name in ("zoom", "rotate", "pan_x", "pan_y", "brightness", "contrast"):
        value = getattr(controls, name)
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidControlState(f"Control {name} must be finite, got {value!r}")
    if controls.zoom <= 0:
        raise InvalidControlState(f"zoom must be > 0, got {controls.zoom}")
    return controls
