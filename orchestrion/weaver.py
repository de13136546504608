"""Which aspects are woven into which packages."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


class BehaviorOverride(enum.Enum):
    """How weaving into a package differs from the default."""

    # Default weaving, and no further special case is looked at.
    NO_OVERRIDE = 0
    # Nothing is ever woven into the package.
    NEVER_WEAVE = 1
    # Only aspects flagged as tracer-internal are woven.
    WEAVE_TRACER_INTERNAL = 2


@dataclass(frozen=True)
class SpecialCase:
    """A package path (or path prefix) with special weaving behaviour."""

    path: str
    prefix: bool
    behavior: BehaviorOverride

    def matches(self, import_path: str) -> bool:
        """Return True if ``import_path`` is covered by this special case."""
        if import_path == self.path:
            return True
        return self.prefix and import_path.startswith(self.path + "/")


# Evaluated in order; the first match wins.
WEAVING_SPECIAL_CASES: tuple[SpecialCase, ...] = (
    SpecialCase("github.com/DataDog/orchestrion/runtime", True, BehaviorOverride.NO_OVERRIDE),
    SpecialCase("github.com/DataDog/orchestrion", True, BehaviorOverride.NEVER_WEAVE),
    SpecialCase("gopkg.in/DataDog/dd-trace-go.v1", True, BehaviorOverride.WEAVE_TRACER_INTERNAL),
    SpecialCase(
        "github.com/DataDog/dd-trace-go/internal/orchestrion/_integration",
        True,
        BehaviorOverride.NO_OVERRIDE,
    ),
    SpecialCase(
        "github.com/DataDog/dd-trace-go/v2/internal/orchestrion/_integration",
        True,
        BehaviorOverride.NO_OVERRIDE,
    ),
    SpecialCase("github.com/DataDog/dd-trace-go", True, BehaviorOverride.WEAVE_TRACER_INTERNAL),
    SpecialCase("github.com/DataDog/go-tuf/client", False, BehaviorOverride.NEVER_WEAVE),
)


def special_case_for(import_path: str) -> SpecialCase | None:
    """Return the first special case matching ``import_path``, if any."""
    return next((case for case in WEAVING_SPECIAL_CASES if case.matches(import_path)), None)


@dataclass(frozen=True)
class Weaver:
    """Weaves aspects into the package with the given import path."""

    import_path: str

    def behavior(self) -> BehaviorOverride:
        """Return the weaving behaviour that applies to this package."""
        case = special_case_for(self.import_path)
        return case.behavior if case is not None else BehaviorOverride.NO_OVERRIDE

    def filter_aspects(self, aspects: Iterable[Any]) -> list[Any]:
        """Return the aspects to weave into this package.

        Aspects carry a ``tracer_internal`` attribute; only those with it set
        survive in tracer-internal mode, and none at all where weaving is
        disabled to prevent circular instrumentation.
        """
        behavior = self.behavior()
        if behavior is BehaviorOverride.NEVER_WEAVE:
            return []
        if behavior is BehaviorOverride.WEAVE_TRACER_INTERNAL:
            return [aspect for aspect in aspects if getattr(aspect, "tracer_internal", False)]
        return list(aspects)