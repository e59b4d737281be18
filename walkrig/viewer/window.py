#walkrig/viewer/window.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from ..config import DEFAULT_CONFIG, AnimConfig
from ..rig import Rig
from ..solver import solve
from .evaluator import bone_segments, evaluate_world
from .gl_frame import GLSkeletonFrame


class ViewerWindow(tk.Toplevel):
    """
    Walker playback at the configured frame rate.

    Toolbar: play/pause, rewind, single-frame step, loop toggle, and a
    scrubber over [0, total_frames].
    """

    def __init__(self, master: tk.Misc, *, rig: Rig, config: AnimConfig = DEFAULT_CONFIG) -> None:
        super().__init__(master)
        self.title(f"walkrig viewer ({config.total_frames} frames @ {config.frame_rate} fps)")
        self.geometry("980x680")

        self.rig = rig
        self.cfg = config
        self.current_frame = 0
        self.playing = False
        self.loop_var = tk.BooleanVar(value=True)
        self.frame_var = tk.DoubleVar(value=0.0)
        self.tick_ms = max(1, int(round(1000.0 / float(config.frame_rate))))
        self._after_id = None

        bar = ttk.Frame(self)
        bar.pack(side="top", fill="x", padx=6, pady=4)
        self.play_btn = ttk.Button(bar, text="Play", width=7, command=self._toggle_play)
        self.play_btn.pack(side="left")
        ttk.Button(bar, text="|<", width=3, command=lambda: self._seek(0)).pack(side="left", padx=(4, 0))
        ttk.Button(bar, text="<", width=3, command=lambda: self._seek(self.current_frame - 1)).pack(side="left")
        ttk.Button(bar, text=">", width=3, command=lambda: self._seek(self.current_frame + 1)).pack(side="left")
        ttk.Checkbutton(bar, text="Loop", variable=self.loop_var).pack(side="left", padx=(8, 0))

        self.frame_label = ttk.Label(bar, width=18, anchor="e")
        self.frame_label.pack(side="right")
        scrub = ttk.Scale(
            bar,
            from_=0,
            to=max(1, config.total_frames),
            orient="horizontal",
            variable=self.frame_var,
            command=lambda v: self._seek(int(float(v))),
        )
        scrub.pack(side="left", fill="x", expand=True, padx=8)

        self.gl = GLSkeletonFrame(self)
        self.gl.pack(fill="both", expand=True)

        self.bind("<space>", lambda _e: self._toggle_play())
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._redraw()

    def _redraw(self) -> None:
        world = evaluate_world(self.rig, solve(self.rig, self.current_frame, self.cfg.total_frames, self.cfg))
        self.gl.set_segments(bone_segments(self.rig, world), world.origins[self.rig.root.name])
        self.frame_label.configure(text=f"frame {self.current_frame} / {self.cfg.total_frames}")

    def _seek(self, frame: int) -> None:
        self.current_frame = max(0, min(self.cfg.total_frames, frame))
        self.frame_var.set(self.current_frame)
        self._redraw()

    def _toggle_play(self) -> None:
        self.playing = not self.playing
        self.play_btn.configure(text="Pause" if self.playing else "Play")
        if self.playing:
            self._schedule()
        elif self._after_id is not None:
            self.after_cancel(self._after_id)
            self._after_id = None

    def _schedule(self) -> None:
        self._after_id = self.after(self.tick_ms, self._advance)

    def _advance(self) -> None:
        self._after_id = None
        if not self.playing:
            return
        nxt = self.current_frame + 1
        if nxt > self.cfg.total_frames:
            if not self.loop_var.get():
                self._toggle_play()
                return
            nxt = 0
        self._seek(nxt)
        self._schedule()

    def _on_close(self) -> None:
        self.playing = False
        if self._after_id is not None:
            self.after_cancel(self._after_id)
        self.destroy()


def run_viewer(rig: Rig, config: AnimConfig = DEFAULT_CONFIG) -> None:
    app = tk.Tk()
    app.withdraw()
    win = ViewerWindow(app, rig=rig, config=config)
    win.bind("<Destroy>", lambda e: app.destroy() if e.widget is win else None)
    app.mainloop()
