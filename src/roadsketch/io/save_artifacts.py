"""
Artifact saving utilities for the road sketch engine.

Writes JSON and SVG debug output and reads replayable path scripts.
"""

import json
import os

import yaml

from roadsketch.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump()

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_svg(svg_content, path):
    """
    Save SVG content (an svgwrite Drawing or a string) to file.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(svg_content, "tostring"):
        content = svg_content.tostring()
    else:
        content = str(svg_content)

    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    tracer.event(f"Saved SVG: {path}")


def load_paths(path):
    """
    Read a list of polylines from a YAML or JSON file.

    Either a bare list or a mapping with a "paths" key; each polyline is a
    list of [x, y] or [x, y, z] points with at least two entries.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("paths", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of paths in {path}")

    polylines = []
    for i, polyline in enumerate(data):
        if not isinstance(polyline, list) or len(polyline) < 2:
            raise ValueError(f"Path {i} in {path} needs at least two points")
        for point in polyline:
            if not isinstance(point, list) or len(point) not in (2, 3):
                raise ValueError(f"Path {i} in {path} has a malformed point: {point!r}")
        polylines.append(polyline)

    return polylines


def meshes_to_dict(network):
    """Plain-data view of every mesh, keyed for JSON output."""
    junctions = {}
    for node, road_node in network.layout.junctions.items():
        junctions[str(node)] = {
            "position": network.graph.position(node).tolist(),
            "vertices": road_node.mesh.vertices,
            "indices": road_node.mesh.indices,
            "element_count": road_node.mesh.element_count,
        }

    segments = []
    for key, segment in network.layout.segments.items():
        segments.append({
            "nodes": list(key),
            "vertices": segment.mesh.vertices,
            "indices": segment.mesh.indices,
            "element_count": segment.mesh.element_count,
        })

    return {"junctions": junctions, "segments": segments}
