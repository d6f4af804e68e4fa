"""Configuration loading and validation for simulation batches."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

CROSSOVER_KINDS: tuple[str, ...] = ("uniform", "single_point", "multi_point")
FITNESS_KINDS: tuple[str, ...] = ("clusters_of_4", "count_ts")


@dataclass(frozen=True)
class ExperimentConfig:
    """Validated, immutable parameter set shared by every trial of a batch.

    Provides typed field access for the known parameters and dictionary-style
    access for extensible optional parameters.
    """

    name: str = "default"
    strand_size: int = 100
    population_size: int = 256
    generation_limit: int = 16384
    batch_size: int = 16
    num_individuals_per_parents: int = 2
    selection_ratio: float = 0.5
    mutation_rate: float = 0.05
    reinsertion_ratio: float = 0.5
    crossover: str = "single_point"
    cut_points: int = 1
    fitness: str = "clusters_of_4"
    seed: int = 0
    extras: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a configuration value by key.

        Args:
            key: Configuration key name.
            default: Value to return if key does not exist.

        Returns:
            Value associated with ``key`` or ``default``.
        """
        if key != "extras" and hasattr(self, key):
            return getattr(self, key)
        return self.extras.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Return a full dictionary view of the configuration."""
        payload = {f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.name != "extras"}
        payload.update(self.extras)
        return payload

    def replace(self, **changes: Any) -> "ExperimentConfig":
        """Return a validated copy with ``changes`` applied."""
        payload = self.to_dict()
        payload.update(changes)
        return _validate_and_build(payload)


_FIELD_TYPES: dict[str, type] = {
    f.name: {"int": int, "float": float, "str": str}[str(f.type)]
    for f in dataclasses.fields(ExperimentConfig)
    if f.name != "extras"
}


class ConfigLoader:
    """Load and validate configuration files (YAML or JSON)."""

    @staticmethod
    def load(path: str | Path) -> ExperimentConfig:
        """Load a single configuration from ``path``.

        Args:
            path: Path to a YAML or JSON config file.

        Returns:
            A validated ``ExperimentConfig`` instance.
        """
        payload = _read_config_payload(path)
        if not isinstance(payload, Mapping):
            raise ValueError("Single config file must contain a mapping object.")
        return _validate_and_build(payload)

    @staticmethod
    def load_many(path: str | Path) -> list[ExperimentConfig]:
        """Load one or many configurations from ``path``.

        Supports:
            - top-level mapping for a single configuration
            - top-level list of mappings
            - top-level mapping with an ``experiments`` list
            - top-level mapping with an optional ``base`` mapping and a
              ``sweep`` of one parameter over a list of values
        """
        payload = _read_config_payload(path)
        return parse_many(payload)


def parse_many(payload: Any) -> list[ExperimentConfig]:
    """Build configurations from an already decoded payload."""
    if isinstance(payload, list):
        return [_validate_and_build(item) for item in payload]

    if isinstance(payload, Mapping) and "sweep" in payload:
        return expand_sweep(payload.get("base", {}), payload["sweep"])

    if isinstance(payload, Mapping) and "experiments" in payload:
        experiments = payload["experiments"]
        if not isinstance(experiments, list):
            raise ValueError("'experiments' must be a list of mappings.")
        return [_validate_and_build(item) for item in experiments]

    if isinstance(payload, Mapping):
        return [_validate_and_build(payload)]

    raise ValueError("Unsupported config file structure.")


def expand_sweep(base: Mapping[str, Any], sweep: Mapping[str, Any]) -> list[ExperimentConfig]:
    """Vary one parameter of ``base`` over ``sweep['values']``.

    Each configuration is named ``"<parameter> = <value>"``, suffixed with
    ``" (default)"`` when the value equals the base value.
    """
    if not isinstance(base, Mapping):
        raise ValueError("'base' must be a mapping.")
    if not isinstance(sweep, Mapping) or "parameter" not in sweep or "values" not in sweep:
        raise ValueError("'sweep' must be a mapping with 'parameter' and 'values'.")
    parameter = str(sweep["parameter"])
    values = sweep["values"]
    if not isinstance(values, list) or not values:
        raise ValueError("'sweep.values' must be a non-empty list.")
    if parameter not in _FIELD_TYPES or parameter in {"name", "seed"}:
        raise ValueError(f"Cannot sweep over '{parameter}'.")

    base_config = _validate_and_build(base)
    base_value = base_config.get(parameter)
    configs: list[ExperimentConfig] = []
    for value in values:
        coerced = _FIELD_TYPES[parameter](value)
        suffix = " (default)" if coerced == base_value else ""
        configs.append(base_config.replace(**{parameter: coerced, "name": f"{parameter} = {value}{suffix}"}))
    return configs


def _read_config_payload(path: str | Path) -> Any:
    """Read raw config payload from JSON or YAML file."""
    config_path = Path(path)
    suffix = config_path.suffix.lower()
    content = config_path.read_text(encoding="utf-8")

    if suffix == ".json":
        return json.loads(content)
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(content)
    raise ValueError(f"Unsupported config extension: {suffix}")


def _validate_and_build(payload: Mapping[str, Any]) -> ExperimentConfig:
    """Validate raw mapping and build ``ExperimentConfig``."""
    if not isinstance(payload, Mapping):
        raise ValueError("Configuration entries must be mappings.")

    values: dict[str, Any] = {}
    for key, cast in _FIELD_TYPES.items():
        if key in payload:
            try:
                values[key] = cast(payload[key])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid value for '{key}': {payload[key]!r}") from exc
    extras = {k: v for k, v in payload.items() if k not in _FIELD_TYPES}
    config = ExperimentConfig(**values, extras=extras)

    if not config.name:
        raise ValueError("name must be non-empty")
    if config.strand_size <= 0:
        raise ValueError("strand_size must be > 0")
    if config.population_size <= 0:
        raise ValueError("population_size must be > 0")
    if config.generation_limit <= 0:
        raise ValueError("generation_limit must be > 0")
    if config.batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    if config.num_individuals_per_parents <= 0:
        raise ValueError("num_individuals_per_parents must be > 0")
    if config.selection_ratio <= 0.0:
        raise ValueError("selection_ratio must be > 0.0")
    if not 0.0 <= config.mutation_rate <= 1.0:
        raise ValueError("mutation_rate must be in [0.0, 1.0]")
    if not 0.0 < config.reinsertion_ratio <= 1.0:
        raise ValueError("reinsertion_ratio must be in (0.0, 1.0]")
    if config.crossover not in CROSSOVER_KINDS:
        raise ValueError(f"crossover must be one of {', '.join(CROSSOVER_KINDS)}")
    if config.fitness not in FITNESS_KINDS:
        raise ValueError(f"fitness must be one of {', '.join(FITNESS_KINDS)}")

    if config.crossover in {"single_point", "multi_point"}:
        cut_points = 1 if config.crossover == "single_point" else config.cut_points
        if config.num_individuals_per_parents < 2:
            raise ValueError(f"{config.crossover} crossover needs num_individuals_per_parents >= 2")
        if not 0 < cut_points < config.strand_size:
            raise ValueError("cut_points must be in [1, strand_size - 1]")
    if config.fitness == "clusters_of_4" and config.strand_size % 4 != 0:
        raise ValueError("clusters_of_4 fitness needs a strand_size divisible by 4")

    return config
