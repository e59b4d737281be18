import tempfile
import unittest
from pathlib import Path

from walkrig.config import DEFAULT_CONFIG
from walkrig.emitter import emit_script, fmt, fmt_vec, write_script
from walkrig.rig import build_rig
from walkrig.sequencer import build_scene
from walkrig.strip import StripConfig


class TestFormatting(unittest.TestCase):
    def test_four_decimals(self) -> None:
        self.assertEqual(fmt(1.0), "1.0000")
        self.assertEqual(fmt(-0.45), "-0.4500")
        self.assertEqual(fmt_vec((0.0, 0.2, 1.9)), "(0.0000, 0.2000, 1.9000)")


class TestEmitScript(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = DEFAULT_CONFIG.with_overrides(total_frames=2)
        self.scene = build_scene(build_rig(), self.cfg)

    def test_is_deterministic(self) -> None:
        again = build_scene(build_rig(), self.cfg)
        self.assertEqual(emit_script(self.scene), emit_script(again))

    def test_frame_range_and_fps(self) -> None:
        text = emit_script(self.scene)
        self.assertIn("scene.frame_start = 0\n", text)
        self.assertIn("scene.frame_end = 2\n", text)
        self.assertIn("scene.render.fps = 60\n", text)

    def test_creation_precedes_parenting_precedes_keys(self) -> None:
        text = emit_script(self.scene)

        last_create = text.rindex("bpy.ops.mesh.primitive_cube_add")
        parenting = text.index("# --- Parenting ---")
        keys = text.index("_KEYS = [")
        camera = text.index("# --- Setup Camera ---")
        self.assertLess(last_create, parenting)
        self.assertLess(parenting, keys)
        self.assertLess(keys, camera)
        self.assertIn("objs['Head'].parent = objs['Torso']\n", text)

    def test_keyframe_rows(self) -> None:
        text = emit_script(self.scene)
        self.assertIn("    ('Torso', 'location', 2, (0.0000, 0.2000, 1.9000)),\n", text)
        self.assertIn("    ('Head', 'rotation_euler', 0, (0.0000, 0.0000, 0.0000)),\n", text)
        self.assertEqual(text.count("    ('LegL_Upper', "), 3 * 2)

    def test_camera_tracks_root(self) -> None:
        text = emit_script(self.scene)
        self.assertIn("track.target = objs['Torso']", text)
        self.assertIn("    (0, (9.0000, -14.0000, 5.4000)),\n", text)

    def test_no_negative_zero(self) -> None:
        self.assertNotIn("-0.0000", emit_script(build_scene(build_rig(), DEFAULT_CONFIG.with_overrides(total_frames=60))))

    def test_audio_section_only_with_audio(self) -> None:
        self.assertNotIn("new_sound", emit_script(self.scene))

        scene = build_scene(build_rig(), self.cfg, audio_path=Path("/tmp/beat.wav"))
        text = emit_script(scene)
        self.assertIn("new_sound('Soundtrack', '/tmp/beat.wav', 1, 0)", text)
        self.assertIn("audio_codec = 'AAC'", text)

    def test_sound_strip_collection_chosen_by_presence(self) -> None:
        scene = build_scene(build_rig(), self.cfg, audio_path=Path("/tmp/beat.wav"))
        text = emit_script(scene)
        # an empty strips collection is falsy, so it must not be picked by truthiness
        self.assertIn("_strips = _se.strips if hasattr(_se, 'strips') else _se.sequences\n", text)
        self.assertNotIn(" or scene.sequence_editor.sequences", text)

    def test_materials_only_for_used_classes(self) -> None:
        text = emit_script(self.scene)
        self.assertIn("'skin': _material('skin'", text)
        self.assertIn("'primary_accent': _material(", text)
        self.assertIn("'secondary_accent': _material(", text)

    def test_limb_meshes_hang_below_joint(self) -> None:
        text = emit_script(self.scene)
        self.assertIn("Matrix.Translation((0.0, 0.0, -0.3500)) @ Matrix.Diagonal((0.1200, 0.1200, 0.3500, 1.0))", text)
        self.assertIn("obj.data.transform(Matrix.Diagonal((0.4500, 0.2500, 0.6000, 1.0)))", text)

    def test_strip_cubes_are_created(self) -> None:
        scene = build_scene(build_rig(), self.cfg, strip=StripConfig(count=2))
        text = emit_script(scene)
        self.assertIn("obj.name = 'StripCube_01'", text)
        self.assertIn("    ('StripCube_00', 'location', 0, (0.0000, 0.0000, 0.0000)),\n", text)

    def test_render_output(self) -> None:
        text = emit_script(self.scene, render_output="//clips/walk_")
        self.assertTrue(text.endswith("scene.render.filepath = '//clips/walk_'\n"))


class TestWriteScript(unittest.TestCase):
    def test_writes_file_and_parents(self) -> None:
        scene = build_scene(build_rig(), DEFAULT_CONFIG.with_overrides(total_frames=1))
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "nested" / "generated_script.py"
            out = write_script(scene, path)

            self.assertEqual(out, path)
            self.assertEqual(path.read_text(encoding="utf-8"), emit_script(scene))


if __name__ == "__main__":
    unittest.main()
