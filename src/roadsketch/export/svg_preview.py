"""
SVG preview of a road network for debugging.

Draws segment quads, junction fans, centre lines and nodes so a replayed
sketch can be inspected without a renderer.
"""

import svgwrite

from roadsketch.tracer import get_tracer, trace


@trace(label="create_preview_svg")
def create_preview_svg(network, config):
    """Build an svgwrite Drawing for the current network state."""
    tracer = get_tracer()
    graph = network.graph
    margin = config.debug.svg_margin + config.road.width

    positions = [graph.position(n) for n in graph.nodes()]
    if positions:
        min_x = min(p[0] for p in positions) - margin
        min_y = min(p[1] for p in positions) - margin
        max_x = max(p[0] for p in positions) + margin
        max_y = max(p[1] for p in positions) + margin
    else:
        min_x, min_y, max_x, max_y = 0.0, 0.0, 100.0, 100.0
    width, height = max_x - min_x, max_y - min_y

    dwg = svgwrite.Drawing(size=(f"{width:.0f}px", f"{height:.0f}px"))
    dwg.viewbox(min_x, min_y, width, height)

    segment_group = dwg.g(id="segments", fill="black", fill_opacity=0.25, stroke="none")
    for key, segment in network.layout.segments.items():
        segment_group.add(dwg.polygon(
            points=_xy(segment.mesh.points()),
            id=f"segment_{key[0]}_{key[1]}",
        ))
    dwg.add(segment_group)

    junction_group = dwg.g(id="junctions", fill="red", fill_opacity=0.25, stroke="none")
    for node, road_node in network.layout.junctions.items():
        points = road_node.mesh.points()
        indices = road_node.mesh.indices
        fan = dwg.g(id=f"junction_{node}")
        for i in range(0, len(indices), 3):
            fan.add(dwg.polygon(points=_xy(points[k] for k in indices[i:i + 3])))
        junction_group.add(fan)
    dwg.add(junction_group)

    line_group = dwg.g(id="centerlines", stroke="gray", stroke_width=1, fill="none")
    for u, v in graph.edges():
        a, b = graph.position(u), graph.position(v)
        line_group.add(dwg.line(start=(a[0], a[1]), end=(b[0], b[1])))
    dwg.add(line_group)

    node_group = dwg.g(id="nodes", fill="black")
    for node, pos in zip(graph.nodes(), positions):
        node_group.add(dwg.circle(center=(pos[0], pos[1]), r=2, id=f"node_{node}"))
    dwg.add(node_group)

    tracer.event(f"Preview: {len(network.layout.segments)} segments, {len(network.layout.junctions)} junctions")

    return dwg


def _xy(points):
    return [(float(p[0]), float(p[1])) for p in points]
