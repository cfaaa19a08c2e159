"""Tests for configuration loading."""

import os

import yaml


class TestLoadConfig:
    """Tests for YAML configuration."""

    def test_defaults(self):
        """Test the built-in defaults."""
        from roadsketch.config import load_config

        config = load_config()

        assert config.geometry.tolerance == 0.1
        assert config.road.width == 16.0
        assert config.snap.radius == 8.0
        assert config.topology.max_iterations == 10000
        assert not config.tracing.enabled

    def test_missing_file_uses_defaults(self, temp_dir):
        from roadsketch.config import EngineConfig, load_config

        assert load_config(os.path.join(temp_dir, "absent.yaml")) == EngineConfig()

    def test_partial_override(self, temp_dir):
        """Test that a partial file only changes the keys it names."""
        from roadsketch.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"road": {"width": 10.0}, "snap": {"radius": 4}}, f)

        config = load_config(path)

        assert config.road.width == 10.0
        assert config.snap.radius == 4
        assert config.geometry.tolerance == 0.1

    def test_unknown_keys_ignored(self, temp_dir):
        from roadsketch.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"road": {"colour": "grey"}, "lanes": {"count": 2}, "snap": 3}, f)

        config = load_config(path)

        assert not hasattr(config.road, "colour")
        assert config.snap.radius == 8.0

    def test_save_default_round_trip(self, temp_dir):
        """Test that the saved template loads back to the defaults."""
        from roadsketch.config import EngineConfig, load_config, save_default_config

        path = os.path.join(temp_dir, "default.yaml")
        save_default_config(path)

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        assert "file_path" not in data["tracing"]
        assert load_config(path) == EngineConfig()

    def test_network_uses_config(self, temp_dir):
        """Test that the network picks up tolerance and width."""
        from roadsketch.config import load_config
        from roadsketch.network import RoadNetwork

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"geometry": {"tolerance": 0.5}, "road": {"width": 4.0}}, f)

        network = RoadNetwork(load_config(path))

        assert network.graph.tolerance == 0.5
        assert network.layout.width == 4.0
        assert network.graph.canonicalize((0, 0)) == network.graph.canonicalize((0.3, 0))
