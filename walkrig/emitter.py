"""
Fold a SceneStream into a Blender Python script.

This is the only place that writes output text. Numbers are printed with
four decimals, and the records come in already ordered, so identical scenes
always produce identical scripts.
"""
from __future__ import annotations

from pathlib import Path

from .rig import limb_kind
from .sequencer import FIRST_FRAME, SceneStream
from .types import MaterialClass, Vec3


MATERIAL_COLORS = {
    MaterialClass.SKIN: (0.93, 0.76, 0.62, 1.0),
    MaterialClass.PRIMARY_ACCENT: (0.15, 0.35, 0.8, 1.0),
    MaterialClass.SECONDARY_ACCENT: (0.85, 0.3, 0.2, 1.0),
}

_HEADER = """\
import bpy
from mathutils import Matrix

# --- Setup Scene ---
bpy.ops.object.select_all(action='DESELECT')
bpy.ops.object.select_by_type(type='MESH')
bpy.ops.object.delete()

scene = bpy.context.scene
"""

_MATERIAL_FN = """
def _material(name, rgba):
    mat = bpy.data.materials.get(name) or bpy.data.materials.new(name=name)
    mat.diffuse_color = rgba
    return mat

"""

_KEY_LOOP = """
for name, data_path, frame, value in _KEYS:
    obj = objs[name]
    setattr(obj, data_path, value)
    obj.keyframe_insert(data_path=data_path, frame=frame)
"""

_CAMERA = """
# --- Setup Camera ---
camera_data = bpy.data.cameras.new(name={cam!r})
camera_object = bpy.data.objects.new({cam!r}, camera_data)
bpy.context.collection.objects.link(camera_object)
scene.camera = camera_object

track = camera_object.constraints.new(type='TRACK_TO')
track.target = objs[{target!r}]
track.track_axis = 'TRACK_NEGATIVE_Z'
track.up_axis = 'UP_Y'
"""

_CAMERA_LOOP = """
for frame, value in _CAMERA_KEYS:
    camera_object.location = value
    camera_object.keyframe_insert(data_path='location', frame=frame)
"""

_AUDIO = """
# --- Audio ---
if scene.sequence_editor is None:
    scene.sequence_editor_create()
_se = scene.sequence_editor
_strips = _se.strips if hasattr(_se, 'strips') else _se.sequences
_strips.new_sound('Soundtrack', {path!r}, {channel}, {start})
"""

_RENDER = """
# --- Render Settings ---
try:
    scene.render.engine = 'BLENDER_EEVEE_NEXT'
except TypeError:
    scene.render.engine = 'BLENDER_EEVEE'
scene.render.image_settings.file_format = 'FFMPEG'
scene.render.ffmpeg.format = 'MPEG4'
scene.render.ffmpeg.codec = 'H264'
"""


def fmt(x: float) -> str:
    return f"{x:.4f}"


def fmt_vec(v: Vec3) -> str:
    return f"({fmt(v[0])}, {fmt(v[1])}, {fmt(v[2])})"


def _mesh_matrix(name: str, scale: Vec3) -> str:
    # scale is baked into the mesh so children do not inherit it;
    # limb segments hang below their joint
    sx, sy, sz = scale
    diag = f"Matrix.Diagonal(({fmt(sx)}, {fmt(sy)}, {fmt(sz)}, 1.0))"
    if limb_kind(name).limb in ("arm", "leg"):
        return f"Matrix.Translation((0.0, 0.0, {fmt(-sz)})) @ {diag}"
    return diag


def emit_script(scene: SceneStream, render_output: str = "//render_output") -> str:
    out: list[str] = [_HEADER]
    out.append(f"scene.frame_start = {FIRST_FRAME}\n")
    out.append(f"scene.frame_end = {scene.total_frames}\n")
    out.append(f"scene.render.fps = {scene.frame_rate}\n")

    out.append(_MATERIAL_FN)
    out.append("mats = {\n")
    used = sorted({d.material_class for d in scene.declarations}, key=lambda m: m.value)
    for mc in used:
        rgba = ", ".join(fmt(c) for c in MATERIAL_COLORS[mc])
        out.append(f"    {mc.value!r}: _material({mc.value!r}, ({rgba})),\n")
    out.append("}\n")

    out.append("\n# --- Parts ---\nobjs = {}\n")
    for d in scene.declarations:
        out.append(f"bpy.ops.mesh.primitive_cube_add(size=2, location={fmt_vec(d.location)})\n")
        out.append("obj = bpy.context.active_object\n")
        out.append(f"obj.name = {d.name!r}\n")
        out.append(f"obj.rotation_euler = {fmt_vec(d.rotation_euler)}\n")
        out.append(f"obj.data.transform({_mesh_matrix(d.name, d.scale)})\n")
        out.append(f"obj.data.materials.append(mats[{d.material_class.value!r}])\n")
        out.append(f"objs[{d.name!r}] = obj\n")

    if scene.links:
        out.append("\n# --- Parenting ---\n")
        for link in scene.links:
            out.append(f"objs[{link.child!r}].parent = objs[{link.parent!r}]\n")

    out.append("\n# --- Keyframes ---\n_KEYS = [\n")
    for ev in scene.timeline:
        out.append(f"    ({ev.part!r}, {ev.channel!r}, {ev.frame}, {fmt_vec(ev.value)}),\n")
    out.append("]\n")
    out.append(_KEY_LOOP)

    out.append(_CAMERA.format(cam=scene.camera_track.camera, target=scene.camera_track.target))
    out.append("_CAMERA_KEYS = [\n")
    for cue in scene.camera_cues:
        out.append(f"    ({cue.frame}, {fmt_vec(cue.location)}),\n")
    out.append("]\n")
    out.append(_CAMERA_LOOP)

    if scene.audio is not None:
        out.append(_AUDIO.format(
            path=str(scene.audio.path),
            channel=scene.audio.channel,
            start=scene.audio.start_frame,
        ))

    out.append(_RENDER)
    if scene.audio is not None:
        out.append("scene.render.ffmpeg.audio_codec = 'AAC'\n")
    out.append(f"scene.render.filepath = {render_output!r}\n")
    return "".join(out)


def write_script(scene: SceneStream, path: Path, render_output: str = "//render_output", logger=None) -> Path:
    text = emit_script(scene, render_output=render_output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if logger:
        logger.info("Wrote Blender script: %s (%d bytes)", path, len(text.encode("utf-8")))
    return path
