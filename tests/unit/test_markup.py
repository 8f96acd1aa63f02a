"""Tests for SVG serialization and image embedding."""

from urllib.parse import unquote

from clickable_detail.config import CanvasConfig
from clickable_detail.core.markup import embed, render_markup, to_data_uri, to_svg
from clickable_detail.core.nodes import node


class TestToSvg:
    def test_root_gets_namespace_and_default_size(self):
        svg = to_svg(node("svg"))
        assert svg.startswith("<svg ")
        assert 'xmlns="http://www.w3.org/2000/svg"' in svg
        assert 'width="750"' in svg
        assert 'height="375"' in svg

    def test_root_declared_size_wins(self):
        svg = to_svg(node("svg", width=200, height=100))
        assert 'width="200"' in svg
        assert 'height="100"' in svg
        assert svg.count("width=") == 1

    def test_attribute_names(self):
        svg = to_svg(node("circle", cx=1, cy=2, radius=3, stroke_width=2, color="red"))
        assert 'r="3"' in svg
        assert 'stroke-width="2"' in svg
        assert 'fill="red"' in svg

    def test_integer_valued_floats(self):
        assert 'x="5"' in to_svg(node("rect", x=5.0))
        assert 'x="5.5"' in to_svg(node("rect", x=5.5))

    def test_callbacks_and_ids_are_not_serialized(self):
        svg = to_svg(node("rect", id="box", x=0, on_click=lambda p: None))
        assert "id=" not in svg
        assert "lambda" not in svg

    def test_visibility(self):
        assert 'visibility="hidden"' in to_svg(node("rect", visible=False))
        assert 'visibility="visible"' in to_svg(node("rect", visible=True))

    def test_text_is_escaped(self):
        svg = to_svg(node("text", text="a < b & c"))
        assert svg == "<text>a &lt; b &amp; c</text>"

    def test_children_nested_in_order(self):
        svg = to_svg(node("g", node("rect"), node("circle")))
        assert svg == "<g><rect/><circle/></g>"

    def test_kind_to_tag(self):
        assert to_svg(node("toggle")).startswith("<g")
        assert to_svg(node("link", href="https://example.com", text="go")).startswith("<a ")
        assert to_svg(node("web_view", image_data_uri="data:x")).startswith("<image ")

    def test_image_is_self_closing(self):
        assert to_svg(node("image", href="data:x", text="ignored")).endswith("/>")

    def test_polygon_points_from_pairs(self):
        svg = to_svg(node("polygon", points=[(0, 0), (10, 0), (10, 10)]))
        assert 'points="0,0 10,0 10,10"' in svg

    def test_attribute_quotes_escaped(self):
        svg = to_svg(node("rect", style='font-family: "Helvetica"'))
        assert "Helvetica" in svg
        assert svg.count("<rect") == 1


class TestEmbed:
    def test_data_uri_round_trips(self):
        svg = to_svg(node("svg", node("circle", cx=1, cy=1, r=1)))
        uri = to_data_uri(svg)
        assert uri.startswith("data:image/svg+xml;utf8,")
        assert " " not in uri
        assert "<" not in uri
        assert unquote(uri) == f"data:image/svg+xml;utf8,{svg}"

    def test_hex_colors_are_escaped(self):
        uri = to_data_uri(to_svg(node("rect", fill="#ff0000")))
        assert "%23ff0000" in uri
        assert "#" not in uri

    def test_embed_uses_alt_text(self):
        tag = embed(node("svg"), CanvasConfig(alt_text="Chart"))
        assert tag.startswith('<img src="data:image/svg+xml;utf8,')
        assert tag.endswith('alt="Chart" />')

    def test_render_markup_one_image_per_root(self):
        markup = render_markup([node("svg", height=10), node("svg", height=20)])
        assert markup.count("<img ") == 2

    def test_render_markup_empty(self):
        assert render_markup([]) == ""
