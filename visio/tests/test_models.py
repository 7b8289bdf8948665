"""Tests for entity defaults, validation and wire serialization."""

import pytest
from pydantic import ValidationError

from visio.models.diagram import (
    DEFAULT_CONNECTION_COLOR,
    DEFAULT_CONNECTION_WIDTH,
    DEFAULT_NODE_COLOR,
    Connection,
    DiagramSnapshot,
    Node,
    resolve_model_id,
)
from visio.models.wire import (
    ConnectionPayload,
    LoadResponse,
    NodePayload,
    SaveRequest,
)


class TestNode:
    """Test Node defaults and validation."""

    def test_defaults(self):
        """A node without a color gets the standard fill."""
        node = Node(id="n1", x=1.5, y=2.0)
        assert node.fill_color == DEFAULT_NODE_COLOR
        assert node.label == ""
        assert node.position == (1.5, 2.0)

    def test_color_is_kept_as_given(self):
        """Colors are stored exactly as written, case included."""
        node = Node(id="n1", x=0, y=0, fill_color="#ABCDEF")
        assert node.fill_color == "#ABCDEF"

    def test_short_hex_color_is_accepted(self):
        assert Node(id="n1", x=0, y=0, fill_color="#Fa0").fill_color == "#Fa0"

    @pytest.mark.parametrize("color", ["red", "#12345", "#ggg", "abcdef", "#abcd"])
    def test_rejects_malformed_color(self, color):
        """Only #rgb and #rrggbb are accepted."""
        with pytest.raises(ValidationError):
            Node(id="n1", x=0, y=0, fill_color=color)

    def test_is_frozen(self):
        """Entities cannot be edited in place."""
        node = Node(id="n1", x=0, y=0)
        with pytest.raises(ValidationError):
            node.label = "changed"


class TestConnection:
    """Test Connection defaults and width coercion."""

    def test_defaults(self):
        connection = Connection(id="c1", from_node_id="a", to_node_id="b")
        assert connection.style == "solid"
        assert connection.color == DEFAULT_CONNECTION_COLOR
        assert connection.width == DEFAULT_CONNECTION_WIDTH
        assert connection.label == ""

    @pytest.mark.parametrize("width", [0, -5, None])
    def test_non_positive_width_becomes_default(self, width):
        """Zero, negative and missing widths fall back to 3."""
        connection = Connection(id="c1", from_node_id="a", to_node_id="b", width=width)
        assert connection.width == 3

    def test_positive_width_is_kept(self):
        connection = Connection(id="c1", from_node_id="a", to_node_id="b", width=7)
        assert connection.width == 7

    def test_joins_either_direction(self):
        connection = Connection(id="c1", from_node_id="a", to_node_id="b")
        assert connection.joins("a", "b")
        assert connection.joins("b", "a")
        assert not connection.joins("a", "c")


class TestModelId:
    def test_blank_model_id_is_default(self):
        assert resolve_model_id(None) == "default"
        assert resolve_model_id("   ") == "default"
        assert resolve_model_id("plant-a") == "plant-a"


class TestWirePayloads:
    """Test camelCase payloads and their conversion to entities."""

    def test_save_request_parses_camel_case(self):
        """The store contract uses camelCase field names."""
        request = SaveRequest.model_validate(
            {
                "modelId": "m1",
                "nodes": [{"id": "n1", "x": 10, "y": 20, "text": "PLC"}],
                "connections": [{"fromNodeId": "n1", "toNodeId": "n2", "width": 0}],
            }
        )
        assert request.model_id == "m1"
        assert request.nodes[0].text == "PLC"
        assert request.connections[0].from_node_id == "n1"

    def test_connections_may_be_null(self):
        request = SaveRequest.model_validate({"nodes": [], "connections": None})
        assert request.connections == []

    def test_dump_uses_camel_case(self):
        request = SaveRequest(
            model_id="m1",
            nodes=[NodePayload(id="n1", x=0, y=0)],
            connections=[ConnectionPayload(from_node_id="n1", to_node_id="n2")],
        )
        data = request.model_dump(by_alias=True)
        assert data["modelId"] == "m1"
        assert "fromNodeId" in data["connections"][0]
        assert "toNodeId" in data["connections"][0]

    def test_blank_ids_are_generated(self):
        """Missing or blank ids get fresh ones when converted to entities."""
        first = NodePayload(id="  ", x=0, y=0).to_node()
        second = NodePayload(x=0, y=0).to_node()
        assert first.id.strip()
        assert second.id.strip()
        assert first.id != second.id

    def test_connection_payload_applies_defaults(self):
        connection = ConnectionPayload(from_node_id="a", to_node_id="b", width=-1).to_connection()
        assert connection.width == 3
        assert connection.style == "solid"
        assert connection.color == "#333333"
        assert connection.label == ""

    def test_payload_rejects_malformed_color(self):
        with pytest.raises(ValidationError):
            NodePayload(x=0, y=0, color="#12345")

    def test_snapshot_round_trip_through_save_request(self):
        """A snapshot survives conversion to a save request and back."""
        snapshot = DiagramSnapshot(
            nodes=[
                Node(id="n1", x=1, y=2, label="A", fill_color="#ff0000"),
                Node(id="n2", x=300, y=2, label="B"),
            ],
            connections=[
                Connection(id="c1", from_node_id="n1", to_node_id="n2", width=5, label="x")
            ],
        )
        request = SaveRequest.from_snapshot("m1", snapshot)
        response = LoadResponse(
            nodes=request.nodes,
            connections=request.connections,
            model_id="m1",
        )
        nodes, connections = response.to_entities()
        assert nodes == snapshot.nodes
        assert connections == snapshot.connections
