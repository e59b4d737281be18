from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from .errors import MalformedRig, UnresolvedParent
from .types import MaterialClass, Part


ROOT_NAME = "Torso"


def classify(part_name: str) -> MaterialClass:
    """
    Material class from the part name. Rules are checked in order and the
    last one always matches, so every name gets a class.
    """
    if "Head" in part_name:
        return MaterialClass.SKIN
    if "Arm" in part_name or "Leg" in part_name:
        return MaterialClass.PRIMARY_ACCENT
    return MaterialClass.SECONDARY_ACCENT


@dataclass(frozen=True)
class LimbKind:
    limb: str  # "head" | "arm" | "leg" | "other"
    side: Optional[str]  # "L" | "R" | None
    segment: str  # "upper" | "lower"


def limb_kind(part_name: str) -> LimbKind:
    limb = "other"
    keyword = ""
    for kw, kind in (("Head", "head"), ("Arm", "arm"), ("Leg", "leg")):
        if kw in part_name:
            limb, keyword = kind, kw
            break

    side = None
    if keyword:
        rest = part_name[part_name.index(keyword) + len(keyword):]
        if rest[:1] in ("L", "R"):
            side = rest[:1]

    segment = "lower" if "Lower" in part_name else "upper"
    return LimbKind(limb=limb, side=side, segment=segment)


@dataclass(frozen=True)
class Rig:
    """
    Flat arena of parts in declaration order. Parents are referenced by name
    and resolved through `index`; nothing holds a pointer to another part.

    `index` and `root_index` are derived from `parts`, and every check runs
    here, so a Rig that exists is valid.
    """
    parts: tuple[Part, ...]
    index: Mapping[str, int] = field(init=False, repr=False, compare=False)
    root_index: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        parts_t = tuple(self.parts)
        if not parts_t:
            raise MalformedRig("rig has no parts")

        index: dict[str, int] = {}
        for i, p in enumerate(parts_t):
            if p.name in index:
                raise MalformedRig(f"duplicate part name {p.name!r}")
            index[p.name] = i

        for p in parts_t:
            if p.parent is not None and p.parent not in index:
                raise UnresolvedParent(p.name, p.parent)

        roots = [i for i, p in enumerate(parts_t) if p.parent is None]
        if len(roots) != 1:
            names = [parts_t[i].name for i in roots]
            raise MalformedRig(f"rig needs exactly one root part (found {names})")

        _check_acyclic(parts_t, index)
        object.__setattr__(self, "parts", parts_t)
        object.__setattr__(self, "index", MappingProxyType(index))
        object.__setattr__(self, "root_index", roots[0])

    @staticmethod
    def from_parts(parts: Iterable[Part]) -> "Rig":
        return Rig(parts=tuple(parts))

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self) -> Iterator[Part]:
        return iter(self.parts)

    @property
    def root(self) -> Part:
        return self.parts[self.root_index]

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.parts]

    def part(self, name: str) -> Part:
        try:
            return self.parts[self.index[name]]
        except KeyError:
            raise KeyError(f"no part named {name!r}") from None

    def parent_index(self, i: int) -> Optional[int]:
        parent = self.parts[i].parent
        if parent is None:
            return None
        pi = self.index.get(parent)
        if pi is None:
            raise UnresolvedParent(self.parts[i].name, parent)
        return pi

    def children(self, name: str) -> list[str]:
        return [p.name for p in self.parts if p.parent == name]

    def depth(self, name: str) -> int:
        d = 0
        cur = self.part(name)
        while cur.parent is not None:
            d += 1
            cur = self.part(cur.parent)
        return d


def _check_acyclic(parts: tuple[Part, ...], index: dict[str, int]) -> None:
    done: set[int] = set()
    for start in range(len(parts)):
        chain: list[int] = []
        seen: set[int] = set()
        cur: Optional[int] = start
        while cur is not None and cur not in done:
            if cur in seen:
                names = " -> ".join(parts[i].name for i in chain)
                raise MalformedRig(f"parent cycle: {names}")
            seen.add(cur)
            chain.append(cur)
            parent = parts[cur].parent
            cur = index[parent] if parent is not None else None
        done.update(chain)


def _side_pair(prefix: str, x: float, anchor: tuple[float, float, float],
               upper_scale, lower_scale, lower_drop: float) -> list[Part]:
    ax, ay, az = anchor
    return [
        Part(f"{prefix}_Upper", (x, ay, az), upper_scale, parent=ROOT_NAME),
        Part(f"{prefix}_Lower", (0.0, 0.0, -lower_drop), lower_scale, parent=f"{prefix}_Upper"),
    ]


def build_rig() -> Rig:
    """
    Canonical walker. Z is up and the walker faces +Y, so its left is -X.
    Child locations are local to the parent; limb segments hang below their
    joint (the emitter offsets their mesh), torso and head are centered.
    """
    parts = [
        Part(ROOT_NAME, (0.0, 0.0, 1.9), (0.45, 0.25, 0.6)),
        Part("Head", (0.0, 0.0, 0.95), (0.28, 0.28, 0.3), parent=ROOT_NAME),
    ]
    arm_upper, arm_lower = (0.12, 0.12, 0.35), (0.1, 0.1, 0.32)
    leg_upper, leg_lower = (0.16, 0.16, 0.33), (0.14, 0.14, 0.32)

    parts += _side_pair("ArmL", -0.6, (0.0, 0.0, 0.5), arm_upper, arm_lower, 0.7)
    parts += _side_pair("ArmR", 0.6, (0.0, 0.0, 0.5), arm_upper, arm_lower, 0.7)
    parts += _side_pair("LegL", -0.25, (0.0, 0.0, -0.6), leg_upper, leg_lower, 0.66)
    parts += _side_pair("LegR", 0.25, (0.0, 0.0, -0.6), leg_upper, leg_lower, 0.66)

    return Rig.from_parts(parts)
