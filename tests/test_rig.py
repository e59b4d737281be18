import unittest

from walkrig.errors import MalformedRig, UnresolvedParent
from walkrig.rig import ROOT_NAME, Rig, build_rig, classify, limb_kind
from walkrig.types import MaterialClass, Part


class TestClassify(unittest.TestCase):
    def test_head_names_are_skin(self) -> None:
        self.assertEqual(classify("Head"), MaterialClass.SKIN)
        self.assertEqual(classify("HeadL"), MaterialClass.SKIN)

    def test_limb_names_are_primary_accent(self) -> None:
        for name in ("ArmL_Upper", "ArmR_Lower", "LegL_Upper", "LegR_Lower"):
            self.assertEqual(classify(name), MaterialClass.PRIMARY_ACCENT, name)

    def test_everything_else_falls_through(self) -> None:
        for name in ("Torso", "StripCube_03", "", "tail"):
            self.assertEqual(classify(name), MaterialClass.SECONDARY_ACCENT, name)

    def test_head_rule_wins_over_limb_rule(self) -> None:
        self.assertEqual(classify("HeadArm"), MaterialClass.SKIN)


class TestLimbKind(unittest.TestCase):
    def test_parses_limb_side_and_segment(self) -> None:
        k = limb_kind("ArmL_Lower")
        self.assertEqual((k.limb, k.side, k.segment), ("arm", "L", "lower"))

        k = limb_kind("LegR_Upper")
        self.assertEqual((k.limb, k.side, k.segment), ("leg", "R", "upper"))

    def test_unknown_names(self) -> None:
        k = limb_kind("Torso")
        self.assertEqual(k.limb, "other")
        self.assertIsNone(k.side)


class TestBuildRig(unittest.TestCase):
    def test_canonical_topology(self) -> None:
        rig = build_rig()

        self.assertEqual(rig.root.name, ROOT_NAME)
        self.assertEqual(rig.names[0], ROOT_NAME)
        self.assertEqual(len(rig), 10)
        self.assertEqual(rig.part("Head").parent, ROOT_NAME)
        self.assertEqual(rig.part("ArmL_Lower").parent, "ArmL_Upper")
        self.assertEqual(rig.part("LegR_Lower").parent, "LegR_Upper")
        self.assertEqual(sorted(rig.children(ROOT_NAME)),
                         ["ArmL_Upper", "ArmR_Upper", "Head", "LegL_Upper", "LegR_Upper"])
        self.assertEqual(rig.depth("LegL_Lower"), 2)

    def test_is_deterministic(self) -> None:
        self.assertEqual(build_rig().parts, build_rig().parts)

    def test_parent_index_is_a_lookup(self) -> None:
        rig = build_rig()
        i = rig.index["ArmR_Lower"]
        self.assertEqual(rig.parts[rig.parent_index(i)].name, "ArmR_Upper")
        self.assertIsNone(rig.parent_index(rig.root_index))

    def test_left_right_mirror(self) -> None:
        rig = build_rig()
        left = rig.part("ArmL_Upper").bind_location
        right = rig.part("ArmR_Upper").bind_location
        self.assertEqual(left[0], -right[0])
        self.assertEqual(left[1:], right[1:])


class TestRigValidation(unittest.TestCase):
    def test_unresolved_parent(self) -> None:
        with self.assertRaises(UnresolvedParent) as ctx:
            Rig.from_parts([
                Part("Torso", (0.0, 0.0, 1.0)),
                Part("Head", (0.0, 0.0, 1.0), parent="Neck"),
            ])
        self.assertEqual(ctx.exception.parent, "Neck")

    def test_missing_root(self) -> None:
        with self.assertRaises(MalformedRig):
            Rig.from_parts([
                Part("A", (0.0, 0.0, 0.0), parent="B"),
                Part("B", (0.0, 0.0, 0.0), parent="A"),
            ])

    def test_two_roots(self) -> None:
        with self.assertRaises(MalformedRig):
            Rig.from_parts([Part("A", (0.0, 0.0, 0.0)), Part("B", (0.0, 0.0, 0.0))])

    def test_cycle_beside_a_valid_root(self) -> None:
        with self.assertRaises(MalformedRig) as ctx:
            Rig.from_parts([
                Part("Torso", (0.0, 0.0, 0.0)),
                Part("A", (0.0, 0.0, 0.0), parent="B"),
                Part("B", (0.0, 0.0, 0.0), parent="A"),
            ])
        self.assertIn("cycle", str(ctx.exception))

    def test_duplicate_names(self) -> None:
        with self.assertRaises(MalformedRig):
            Rig.from_parts([Part("Torso", (0.0, 0.0, 0.0)), Part("Torso", (1.0, 0.0, 0.0), parent="Torso")])

    def test_empty(self) -> None:
        with self.assertRaises(MalformedRig):
            Rig.from_parts([])

    def test_direct_constructor_validates(self) -> None:
        with self.assertRaises(UnresolvedParent):
            Rig(parts=(Part("A", (0.0, 0.0, 0.0), parent="B"),))
        with self.assertRaises(MalformedRig):
            Rig(parts=(Part("A", (0.0, 0.0, 0.0)), Part("B", (0.0, 0.0, 0.0))))

    def test_index_is_derived_and_read_only(self) -> None:
        rig = Rig(parts=[Part("Torso", (0.0, 0.0, 1.0)), Part("Head", (0.0, 0.0, 0.7), parent="Torso")])
        self.assertIsInstance(rig.parts, tuple)
        self.assertEqual(dict(rig.index), {"Torso": 0, "Head": 1})
        self.assertEqual(rig.root_index, 0)
        with self.assertRaises(TypeError):
            rig.index["Tail"] = 2  # type: ignore[index]

    def test_rigs_are_hashable(self) -> None:
        self.assertEqual(hash(build_rig()), hash(build_rig()))
        self.assertEqual(len({build_rig(), build_rig()}), 1)


if __name__ == "__main__":
    unittest.main()
