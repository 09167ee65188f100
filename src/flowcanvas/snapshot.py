"""
Debug snapshots of a diagram as PNG images.

Draws the store's nodes, ports and routed connections (plus the live
connection preview when a controller is given) with Pillow. This is a
debugging aid for inspecting routing and snapping, not the application's
rendering layer.
"""

import math
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .controller import ConnectionDrawing, InteractionController
from .geometry import NODE_HEIGHT, NODE_WIDTH, node_bounds, ports_for
from .models import Node, NodeKind, Point
from .router import route_connections
from .store import DiagramStore


class SnapshotRenderer:
    """Renders a DiagramStore to a Pillow image."""

    def __init__(self, scale: int = 1, margin: int = 40, font_path: Optional[str] = None):
        """
        Args:
            scale: Pixel multiplier for higher-resolution output
            margin: Empty space kept right of and below the furthest node
            font_path: Optional TrueType font for labels
        """
        if scale < 1:
            raise ValueError("scale must be at least 1")
        self.scale = scale
        self.margin = margin
        self.font_path = font_path

        # Colors
        self.bg_color = (249, 250, 251)
        self.fills = {
            NodeKind.STEP: (239, 246, 255),
            NodeKind.CONDITION: (254, 252, 232),
            NodeKind.NOTIFICATION: (240, 253, 244),
        }
        self.outline = (107, 114, 128)
        self.selected_outline = (59, 130, 246)
        self.text_color = (17, 24, 39)
        self.line_color = (107, 114, 128)
        self.preview_color = (59, 130, 246)
        self.port_color = (16, 185, 129)

        self._font = None

    def _get_font(self):
        if self._font is not None:
            return self._font
        if self.font_path:
            self._font = ImageFont.truetype(self.font_path, 11 * self.scale)
        else:
            self._font = ImageFont.load_default()
        return self._font

    def _s(self, point: Point) -> Tuple[float, float]:
        return (point.x * self.scale, point.y * self.scale)

    def canvas_size(self, store: DiagramStore) -> Tuple[int, int]:
        """Image size needed to show every node."""
        width = self.margin * 2
        height = self.margin * 2
        for node in store.nodes:
            width = max(width, int(node.position.x + NODE_WIDTH + self.margin))
            height = max(height, int(node.position.y + NODE_HEIGHT + self.margin))
        return width * self.scale, height * self.scale

    def render(
        self,
        store: DiagramStore,
        controller: Optional[InteractionController] = None,
    ) -> Image.Image:
        """Draw the diagram and return the image."""
        img = Image.new("RGB", self.canvas_size(store), self.bg_color)
        draw = ImageDraw.Draw(img)

        if controller is not None:
            routes = controller.routes()
        else:
            routes = route_connections(store.connections, store.nodes)
        for route in routes:
            self._draw_polyline(draw, route.points, self.line_color)

        selected = controller.selected_node_id if controller is not None else None
        for node in store.nodes:
            self._draw_node(draw, node, node.id == selected)

        if controller is not None and isinstance(controller.state, ConnectionDrawing):
            preview = controller.preview_path()
            self._draw_polyline(draw, preview, self.preview_color)
            snapped = controller.state.snapped_port
            if snapped is not None:
                self._draw_port(draw, snapped.point, filled=True)

        return img

    def _draw_node(self, draw: ImageDraw.ImageDraw, node: Node, selected: bool):
        bounds = node_bounds(node)
        outline = self.selected_outline if selected else self.outline
        width = max(1, self.scale) * (2 if selected else 1)
        fill = self.fills[node.kind]

        if node.kind == NodeKind.CONDITION:
            corners = [
                Point(bounds.center_x, bounds.y),
                Point(bounds.x2, bounds.center_y),
                Point(bounds.center_x, bounds.y2),
                Point(bounds.x, bounds.center_y),
            ]
            draw.polygon([self._s(p) for p in corners], fill=fill, outline=outline)
        else:
            draw.rectangle(
                [self._s(Point(bounds.x, bounds.y)), self._s(Point(bounds.x2, bounds.y2))],
                fill=fill,
                outline=outline,
                width=width,
            )

        font = self._get_font()
        text_box = draw.textbbox((0, 0), node.label, font=font)
        text_w = text_box[2] - text_box[0]
        text_h = text_box[3] - text_box[1]
        cx, cy = self._s(Point(bounds.center_x, bounds.center_y))
        draw.text((cx - text_w / 2, cy - text_h / 2), node.label, fill=self.text_color, font=font)

        for port in ports_for(node):
            self._draw_port(draw, port.point, filled=False)

    def _draw_port(self, draw: ImageDraw.ImageDraw, point: Point, filled: bool):
        r = 4 * self.scale
        x, y = self._s(point)
        draw.ellipse(
            [x - r, y - r, x + r, y + r],
            fill=self.port_color if filled else None,
            outline=self.port_color,
        )

    def _draw_polyline(self, draw: ImageDraw.ImageDraw, points: List[Point], color):
        if len(points) < 2:
            return
        width = max(1, self.scale) * 2
        draw.line([self._s(p) for p in points], fill=color, width=width)
        self._draw_arrowhead(draw, points[-2], points[-1], color)

    def _draw_arrowhead(self, draw, from_point: Point, to_point: Point, color):
        """Draw an arrowhead at the end of a line."""
        x1, y1 = self._s(from_point)
        x2, y2 = self._s(to_point)
        if (x1, y1) == (x2, y2):
            return

        arrow_size = 8 * self.scale
        angle = math.atan2(y2 - y1, x2 - x1)
        angle1 = angle + math.pi * 0.8
        angle2 = angle - math.pi * 0.8

        ax1 = x2 + arrow_size * math.cos(angle1)
        ay1 = y2 + arrow_size * math.sin(angle1)
        ax2 = x2 + arrow_size * math.cos(angle2)
        ay2 = y2 + arrow_size * math.sin(angle2)
        draw.polygon([(x2, y2), (ax1, ay1), (ax2, ay2)], fill=color)


def render_snapshot(
    store: DiagramStore,
    output_path: Optional[str] = None,
    controller: Optional[InteractionController] = None,
    **kwargs,
) -> Image.Image:
    """
    Convenience function to snapshot a diagram.

    Args:
        store: Diagram to draw
        output_path: If given, the image is also saved there as PNG
        controller: Optional controller whose live preview and selection
            are drawn too
        **kwargs: Additional parameters for SnapshotRenderer

    Returns:
        The rendered Pillow image
    """
    img = SnapshotRenderer(**kwargs).render(store, controller)
    if output_path is not None:
        img.save(output_path, "PNG")
    return img
