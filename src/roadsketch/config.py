"""
Configuration for the road sketch engine.

Loads YAML configuration on top of defaults. The engine functions take
tolerance, width and radius as arguments; this layer supplies them.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml


@dataclass
class GeometryConfig:
    """Shared distance tolerance, in world units."""
    tolerance: float = 0.1


@dataclass
class RoadConfig:
    """Road surface dimensions."""
    width: float = 16.0  # full width, offsets use width / 2


@dataclass
class SnapConfig:
    """Pointer snapping onto existing nodes and edges."""
    radius: float = 8.0


@dataclass
class TopologyConfig:
    """Limits for path insertion."""
    max_iterations: int = 10000  # work items per inserted path


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    svg_margin: float = 20.0


@dataclass
class EngineConfig:
    """Complete engine configuration."""
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    road: RoadConfig = field(default_factory=RoadConfig)
    snap: SnapConfig = field(default_factory=SnapConfig)
    topology: TopologyConfig = field(default_factory=TopologyConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def load_config(config_path=None):
    """
    Load configuration from a YAML file.

    Missing sections and keys keep their defaults; unknown keys are ignored.
    """
    config = EngineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into the config dataclasses, section by section."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(EngineConfig())
    # file_path is per-run; leave it out of the template
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
