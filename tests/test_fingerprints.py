import json
import unittest

from walkrig.config import DEFAULT_CONFIG
from walkrig.fingerprints import FingerprintConfig, canonicalize, scene_fingerprint, scene_payload
from walkrig.rig import build_rig
from walkrig.sequencer import build_scene


class TestFingerprint(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = DEFAULT_CONFIG.with_overrides(total_frames=60)
        self.scene = build_scene(build_rig(), self.cfg)

    def test_stable_across_builds(self) -> None:
        again = build_scene(build_rig(), self.cfg, workers=4)
        self.assertEqual(scene_fingerprint(self.scene), scene_fingerprint(again))

    def test_changes_with_motion(self) -> None:
        faster = build_scene(build_rig(), self.cfg.with_overrides(forward_speed=0.2))
        self.assertNotEqual(scene_fingerprint(self.scene), scene_fingerprint(faster))

    def test_canonical_json_is_compact_and_sorted(self) -> None:
        text, sha1 = canonicalize({"b": 1, "a": [1, 2]})
        self.assertEqual(text, '{"a":[1,2],"b":1}')
        self.assertEqual(len(sha1), 40)

    def test_payload_summary(self) -> None:
        payload = scene_payload(self.scene)

        self.assertEqual(payload["frames"], {"total": 60, "rate": 60})
        self.assertEqual(payload["aggregate"]["keyframe_count"], 61 * 10 * 2)
        self.assertEqual(payload["aggregate"]["active_part_count"], 10)
        self.assertEqual(payload["camera"]["target"], "Torso")
        self.assertIsNone(payload["audio"])
        # thighs swing widest; ties broken by name
        self.assertEqual([m["part"] for m in payload["top_movers"][:2]], ["LegL_Upper", "LegR_Upper"])
        json.dumps(payload)

    def test_top_k(self) -> None:
        payload = scene_payload(self.scene, FingerprintConfig(top_k=3))
        self.assertEqual(len(payload["top_movers"]), 3)


if __name__ == "__main__":
    unittest.main()
