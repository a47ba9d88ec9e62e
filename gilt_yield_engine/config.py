from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml


# ---------- Solver ----------

SOLVER_METHODS = ("bisect", "brentq")

# field annotations are strings under `from __future__ import annotations`
_COERCE = {"float": float, "int": int, "str": str}


@dataclass(frozen=True)
class SolverConfig:
    """
    XIRR root-finding parameters.

    The bracket starts at [low, high]; while NPV has the same sign at both ends,
    `high` is pushed out by `expansion_step`, at most `max_expansions` times.
    Refinement runs at most `max_iterations` steps and bisection stops early
    once |NPV| < tolerance.
    """
    low: float = -0.9999
    high: float = 5.0
    expansion_step: float = 5.0
    max_expansions: int = 10
    max_iterations: int = 100
    tolerance: float = 1e-7
    day_basis: float = 365.25
    method: str = "bisect"  # or "brentq"
    yield_decimals: int = 3

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SolverConfig":
        """Build from a mapping, coercing each value to the field's type (YAML reads `1e-7` as text)."""
        data = dict(data or {})
        types = {f.name: f.type for f in fields(cls)}
        unknown = set(data) - set(types)
        if unknown:
            raise ValueError(f"Unknown solver settings: {sorted(unknown)}")
        kwargs = {}
        for name, value in data.items():
            try:
                kwargs[name] = _COERCE[types[name]](value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Solver setting {name}: cannot read {value!r} as {types[name]}.") from exc
        return cls(**kwargs)

    def __post_init__(self):
        if self.method not in SOLVER_METHODS:
            raise ValueError(f"Unsupported solver method: {self.method!r}, expected one of {SOLVER_METHODS}.")
        if self.low <= -1.0 or self.high <= self.low:
            raise ValueError(f"Invalid solver bracket [{self.low}, {self.high}].")


# ---------- Engine ----------

@dataclass(frozen=True)
class EngineConfig:
    """
    Defaults for valuing a gilt list.

    - allowed_tax_rates: investor tax bands the caller may ask for; anything else
      values gross (0%).
    - default_clean_price: quote assumed for gilts missing from the price map.
    """
    allowed_tax_rates: Tuple[float, ...] = (0.0, 0.20, 0.40, 0.45)
    default_clean_price: float = 100.0
    solver: SolverConfig = field(default_factory=SolverConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        data = dict(data or {})
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown engine settings: {sorted(unknown)}")

        cfg = cls(solver=SolverConfig.from_dict(data.get("solver")))
        if "allowed_tax_rates" in data:
            cfg = replace(cfg, allowed_tax_rates=tuple(float(x) for x in data["allowed_tax_rates"]))
        if "default_clean_price" in data:
            cfg = replace(cfg, default_clean_price=float(data["default_clean_price"]))
        return cfg

    @classmethod
    def from_yaml(cls, cfg_path: Union[str, Path]) -> "EngineConfig":
        """
        Load overrides from YAML; keys left out keep their defaults.

            default_clean_price: 100.0
            allowed_tax_rates: [0.0, 0.2, 0.4, 0.45]
            solver:
              method: brentq
              max_iterations: 100
        """
        text = Path(cfg_path).read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{cfg_path}: expected a mapping at top level.")
        return cls.from_dict(data)


DEFAULT_CONFIG = EngineConfig()


def resolve_tax_rate(requested, allowed: Tuple[float, ...] = DEFAULT_CONFIG.allowed_tax_rates) -> float:
    """Requested tax rate if it is one of the allowed bands, else 0.0."""
    try:
        rate = float(requested)
    except (TypeError, ValueError):
        return 0.0
    for a in allowed:
        if abs(rate - a) < 1e-12:
            return float(a)
    return 0.0
