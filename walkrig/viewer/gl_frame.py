from __future__ import annotations

import math
import tkinter as tk
from typing import List, Optional, Tuple

from ..types import Vec3


try:
    from pyopengltk import OpenGLFrame
except Exception as e:  # pragma: no cover
    OpenGLFrame = None  # type: ignore[assignment]
    _TK_GL_ERR: Optional[Exception] = e
else:
    _TK_GL_ERR = None

try:
    from OpenGL import GL
except Exception as e:  # pragma: no cover
    GL = None  # type: ignore[assignment]
    _GL_ERR: Optional[Exception] = e
else:
    _GL_ERR = None


Segment = Tuple[Vec3, Vec3]

GRID_HALF = 10
BONE_RGB = (0.7, 0.7, 0.9)
GRID_RGB = (0.25, 0.25, 0.3)


def _missing_deps_text() -> str:
    lines = ["OpenGL viewer unavailable.", ""]
    if _GL_ERR is not None:
        lines.append(f"PyOpenGL: {_GL_ERR!r}")
    if _TK_GL_ERR is not None:
        lines.append(f"pyopengltk: {_TK_GL_ERR!r}")
    lines += ["", "pip install PyOpenGL pyopengltk"]
    return "\n".join(lines)


class _OrbitCamera:
    """Yaw/pitch/distance around a target that the window moves each frame."""

    def __init__(self) -> None:
        self.yaw = 30.0
        self.pitch = 15.0
        self.dist = 9.0
        self.target: Vec3 = (0.0, 0.0, 1.0)
        self._last: Optional[Tuple[int, int]] = None

    def grab(self, x: int, y: int) -> None:
        self._last = (x, y)

    def drag(self, x: int, y: int) -> bool:
        if self._last is None:
            return False
        lx, ly = self._last
        self.yaw += (x - lx) * 0.4
        self.pitch = max(-89.0, min(89.0, self.pitch + (y - ly) * 0.4))
        self._last = (x, y)
        return True

    def release(self) -> None:
        self._last = None

    def dolly(self, towards: bool) -> None:
        self.dist = max(1.0, min(200.0, self.dist * (0.9 if towards else 1.1)))

    def apply(self) -> None:
        GL.glTranslatef(0.0, 0.0, -self.dist)
        # Z-up world into the Y-up GL eye space
        GL.glRotatef(self.pitch - 90.0, 1.0, 0.0, 0.0)
        GL.glRotatef(self.yaw, 0.0, 0.0, 1.0)
        tx, ty, tz = self.target
        GL.glTranslatef(-tx, -ty, -tz)


def _draw_lines(pairs, rgb, width: float) -> None:
    GL.glLineWidth(width)
    GL.glColor3f(*rgb)
    GL.glBegin(GL.GL_LINES)
    for a, b in pairs:
        GL.glVertex3f(*a)
        GL.glVertex3f(*b)
    GL.glEnd()


def _grid_lines(cx: float, cy: float):
    x0 = math.floor(cx) - GRID_HALF
    y0 = math.floor(cy) - GRID_HALF
    span = 2 * GRID_HALF
    for i in range(span + 1):
        yield (x0 + i, y0, 0.0), (x0 + i, y0 + span, 0.0)
        yield (x0, y0 + i, 0.0), (x0 + span, y0 + i, 0.0)


class GLSkeletonFrame(tk.Frame):
    """
    Tk frame that draws skeleton segments with OpenGL.

    Right-drag orbits, the wheel dollies. When PyOpenGL or pyopengltk is
    missing the frame shows the import errors instead.
    """

    def __init__(self, master: tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.camera = _OrbitCamera()
        self._segments: List[Segment] = []

        if GL is None or OpenGLFrame is None:
            tk.Label(self, text=_missing_deps_text(), justify="left").pack(fill="both", expand=True, padx=10, pady=10)
            self._canvas = None
            return

        outer = self

        class _Canvas(OpenGLFrame):
            def initgl(self) -> None:
                GL.glClearColor(0.07, 0.07, 0.09, 1.0)
                GL.glEnable(GL.GL_DEPTH_TEST)

            def redraw(self) -> None:
                outer._paint(int(self.winfo_width()), int(self.winfo_height()))

        self._canvas = _Canvas(self, width=640, height=480)
        self._canvas.animate = 0
        self._canvas.pack(fill="both", expand=True)

        c = self._canvas
        c.bind("<ButtonPress-3>", lambda e: self.camera.grab(int(e.x), int(e.y)))
        c.bind("<B3-Motion>", self._on_drag)
        c.bind("<ButtonRelease-3>", lambda _e: self.camera.release())
        c.bind("<MouseWheel>", lambda e: self._on_dolly(e.delta > 0))
        c.bind("<Button-4>", lambda _e: self._on_dolly(True))
        c.bind("<Button-5>", lambda _e: self._on_dolly(False))

    @property
    def available(self) -> bool:
        return self._canvas is not None

    def set_segments(self, segments: List[Segment], center: Vec3) -> None:
        self._segments = list(segments)
        self.camera.target = center
        self._request_redraw()

    def _on_drag(self, e: tk.Event) -> None:
        if self.camera.drag(int(e.x), int(e.y)):
            self._request_redraw()

    def _on_dolly(self, towards: bool) -> None:
        self.camera.dolly(towards)
        self._request_redraw()

    def _request_redraw(self) -> None:
        c = self._canvas
        if c is None:
            return
        # pyopengltk renamed its display hook between releases
        hook = getattr(c, "_display", None) or getattr(c, "tkRedraw", None) or c.redraw
        c.after_idle(hook)

    def _paint(self, w: int, h: int) -> None:
        if w <= 1 or h <= 1:
            return
        GL.glViewport(0, 0, w, h)

        GL.glMatrixMode(GL.GL_PROJECTION)
        GL.glLoadIdentity()
        near = 0.1
        top = math.tan(math.radians(22.5)) * near
        right = top * (float(w) / float(h))
        GL.glFrustum(-right, right, -top, top, near, 1000.0)

        GL.glMatrixMode(GL.GL_MODELVIEW)
        GL.glLoadIdentity()
        GL.glClear(GL.GL_COLOR_BUFFER_BIT | GL.GL_DEPTH_BUFFER_BIT)
        self.camera.apply()

        cx, cy, _ = self.camera.target
        _draw_lines(_grid_lines(cx, cy), GRID_RGB, 1.0)
        _draw_lines(self._segments, BONE_RGB, 3.0)
        GL.glFlush()
