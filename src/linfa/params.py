from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, TypeVar

import numpy as np

from linfa.common.config import get_settings
from linfa.errors import InvalidStateError

P = TypeVar("P", bound="Params")


@dataclass(frozen=True)
class Params:
    """Base for hyperparameter sets.

    Instances are immutable. Every setter returns a new instance and never
    validates; `check()` is invoked once by fit/transform before any numeric
    work. Fields whose metadata carries `serialize=False` are left out of
    `to_dict()`.
    """

    def set(self: P, **changes: Any) -> P:
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise TypeError(f"{type(self).__name__} has no hyperparameter(s): {unknown}")
        return replace(self, **changes)

    def check(self) -> None:
        """Raise InvalidStateError when a value is outside its domain."""

    def checked(self: P) -> P:
        self.check()
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.metadata.get("serialize", True)
        }

    @classmethod
    def from_dict(cls: type[P], d: dict[str, Any]) -> P:
        known = {f.name for f in fields(cls) if f.metadata.get("serialize", True)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise TypeError(f"{cls.__name__} has no hyperparameter(s): {unknown}")
        return cls(**d)


@dataclass(frozen=True)
class RandomParams(Params):
    """Hyperparameters of a randomized algorithm.

    Exactly one random source is used per call:
    - rng: an explicit numpy Generator (its state advances on every use)
    - seed: a fresh `np.random.default_rng(seed)` per call
    - neither: a fresh generator seeded with LINFA_SEED
    """

    seed: int | None = None
    rng: np.random.Generator | None = field(
        default=None, compare=False, repr=False, metadata={"serialize": False}
    )

    def with_seed(self: P, seed: int) -> P:
        return replace(self, seed=seed, rng=None)

    def with_rng(self: P, rng: np.random.Generator) -> P:
        return replace(self, rng=rng, seed=None)

    def check(self) -> None:
        if self.seed is not None and self.rng is not None:
            raise InvalidStateError("configure either seed or rng, not both")
        if self.seed is not None:
            check_int("seed", self.seed, minimum=0)
        if self.rng is not None and not isinstance(self.rng, np.random.Generator):
            raise InvalidStateError(f"rng must be a numpy Generator, got {type(self.rng)!r}")

    def random_source(self) -> np.random.Generator:
        if self.rng is not None:
            return self.rng
        seed = self.seed if self.seed is not None else get_settings().default_seed
        return np.random.default_rng(seed)


def check_int(name: str, value: object, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidStateError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidStateError(f"{name} must be >= {minimum}, got {value}")


def check_float(name: str, value: object, *, minimum: float, inclusive: bool = True) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidStateError(f"{name} must be a number, got {value!r}")
    if not np.isfinite(value):
        raise InvalidStateError(f"{name} must be finite, got {value}")
    if value < minimum or (not inclusive and value == minimum):
        op = ">=" if inclusive else ">"
        raise InvalidStateError(f"{name} must be {op} {minimum}, got {value}")
