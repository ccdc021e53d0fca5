"""Machine configuration for the CHIP-8 interpreter."""

from dataclasses import asdict, dataclass, field, fields
from typing import Optional
import json


@dataclass
class QuirkConfig:
    """Points where historical interpreters disagree."""
    shift_uses_vy: bool = False  # 8XY6/8XYE: VX = VY shifted
    load_store_increments_i: bool = False  # FX55/FX65: I += X + 1
    subn_writes_vx: bool = False  # 8XY7: result to VX instead of VY
    jump_uses_vx: bool = False  # BNNN: add VX instead of V0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'QuirkConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown quirk(s): {', '.join(sorted(unknown))}")
        return cls(**{k: bool(v) for k, v in data.items()})


@dataclass
class MachineConfig:
    """CHIP-8 machine configuration."""
    name: str = "CHIP-8"
    quirks: QuirkConfig = field(default_factory=QuirkConfig)
    rng_seed: Optional[int] = None  # None seeds from the OS

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        data = {
            "name": self.name,
            "quirks": self.quirks.to_dict(),
            "rng_seed": self.rng_seed,
        }

        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'MachineConfig':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            name=data.get("name", "CHIP-8"),
            quirks=QuirkConfig.from_dict(data.get("quirks", {})),
            rng_seed=data.get("rng_seed"),
        )

    @classmethod
    def for_model(cls, model: str) -> 'MachineConfig':
        """Get configuration for a named interpreter variant."""
        configs = {
            "CHIP-8": cls(name="CHIP-8"),
            "COSMAC-VIP": cls(
                name="COSMAC-VIP",
                quirks=QuirkConfig(
                    shift_uses_vy=True,
                    load_store_increments_i=True,
                    subn_writes_vx=True,
                ),
            ),
            "SUPER-CHIP": cls(
                name="SUPER-CHIP",
                quirks=QuirkConfig(
                    subn_writes_vx=True,
                    jump_uses_vx=True,
                ),
            ),
        }

        return configs.get(model, configs["CHIP-8"])

    @staticmethod
    def available_models() -> tuple:
        return ("CHIP-8", "COSMAC-VIP", "SUPER-CHIP")
