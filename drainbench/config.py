from __future__ import annotations
import json
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, List

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

DEFAULT_TOTAL_SIZE = 1 * GIB
PACING_MODES = ("none", "drain", "delay")


class ConfigError(ValueError):
    """Raised for a run configuration that cannot be executed."""


# ----------------------------- Run configuration -----------------------------

@dataclass(frozen=True)
class RunConfig:
    chunk_size: int
    total_size: int = DEFAULT_TOTAL_SIZE
    pacing: str = "none"  # 'none', 'drain' or 'delay'
    delay_ms: float = 0.0  # only used by 'delay'
    report: bool = False  # print every monitor sample

    @property
    def chunk_count(self) -> int:
        return self.total_size // self.chunk_size

    def validate(self) -> None:
        for name in ("chunk_size", "total_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.delay_ms, bool) or not isinstance(self.delay_ms, (int, float)):
            raise ConfigError(f"delay_ms must be a number, got {self.delay_ms!r}")
        if not isinstance(self.report, bool):
            raise ConfigError(f"report must be true or false, got {self.report!r}")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.total_size <= 0:
            raise ConfigError(f"total_size must be positive, got {self.total_size}")
        if self.total_size % self.chunk_size != 0:
            raise ConfigError(
                f"total_size {self.total_size} is not divisible by chunk_size {self.chunk_size}"
            )
        if self.pacing not in PACING_MODES:
            raise ConfigError(f"unknown pacing {self.pacing!r}, expected one of {PACING_MODES}")
        if self.delay_ms < 0:
            raise ConfigError(f"delay_ms must not be negative, got {self.delay_ms}")

    def describe(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.pacing != "delay":
            d.pop("delay_ms")
        return d


# Same experiment as the original ad-hoc script: 4 KiB chunks of a 1 GiB
# payload, once ignoring backpressure and once honouring it, plus a paced run.
DEFAULT_CONFIGS: List[RunConfig] = [
    RunConfig(chunk_size=4 * KIB, pacing="none", report=True),
    RunConfig(chunk_size=4 * KIB, pacing="drain", report=True),
    RunConfig(chunk_size=64 * KIB, total_size=64 * MIB, pacing="delay", delay_ms=1.0, report=True),
]


def load_configs(path: str) -> List[RunConfig]:
    """Load a JSON list of run configurations.

    Each entry is an object whose keys are ``RunConfig`` fields, e.g.
    ``{"chunk_size": 4096, "total_size": 16384, "pacing": "drain"}``.
    Entries are not validated here; invalid runs are rejected when executed.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(raw, list):
        raise ConfigError(f"{path}: expected a list of configurations")

    known = {f.name for f in fields(RunConfig)}
    configs = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"{path}: entry {i} is not an object")
        unknown = set(entry) - known
        if unknown:
            raise ConfigError(f"{path}: entry {i} has unknown keys {sorted(unknown)}")
        if "chunk_size" not in entry:
            raise ConfigError(f"{path}: entry {i} is missing chunk_size")
        configs.append(RunConfig(**entry))
    return configs
