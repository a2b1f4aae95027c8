"""
Tests for dispatch keys and websocket envelopes.
"""

import pytest
from pydantic import ValidationError

from guildkit.connection import SocketEnvelope, SocketOpcode
from guildkit.events import NameKey, OpcodeKey, event_key


class TestEventKey:
    """Tests for the tagged dispatch key."""

    def test_int_becomes_opcode_key(self) -> None:
        """Test integers map to opcode keys."""
        assert event_key(1) == OpcodeKey(1)

    def test_str_becomes_name_key(self) -> None:
        """Test strings map to name keys."""
        assert event_key("ChatMessageCreated") == NameKey("ChatMessageCreated")

    def test_key_spaces_are_disjoint(self) -> None:
        """Test an opcode never equals a name with the same text."""
        assert OpcodeKey(1) != NameKey("1")
        assert len({OpcodeKey(1), NameKey("1")}) == 2

    def test_keys_pass_through(self) -> None:
        """Test existing keys are returned unchanged."""
        key = NameKey("DocCreated")
        assert event_key(key) is key

    @pytest.mark.parametrize("value", [True, 1.5, None, b"x"])
    def test_rejects_other_types(self, value: object) -> None:
        """Test unsupported key types raise TypeError."""
        with pytest.raises(TypeError):
            event_key(value)  # type: ignore[arg-type]

    def test_str(self) -> None:
        """Test key display."""
        assert str(OpcodeKey(2)) == "op:2"
        assert str(NameKey("DocCreated")) == "DocCreated"


class TestSocketEnvelope:
    """Tests for SocketEnvelope."""

    def test_parse_event(self) -> None:
        """Test parsing a domain event frame."""
        envelope = SocketEnvelope.from_json(
            '{"op": 0, "t": "ChatMessageCreated", "s": "abc", "d": {"serverId": "x"}}'
        )
        assert envelope.opcode == SocketOpcode.EVENT
        assert envelope.event_name == "ChatMessageCreated"
        assert envelope.message_id == "abc"
        assert envelope.payload == {"serverId": "x"}
        assert envelope.lookup_key == NameKey("ChatMessageCreated")
        assert envelope.is_protocol is False

    def test_lookup_falls_back_to_opcode(self) -> None:
        """Test frames without a name are keyed by opcode."""
        envelope = SocketEnvelope.from_json('{"op": 1, "d": {"heartbeatIntervalMs": 22500}}')
        assert envelope.lookup_key == OpcodeKey(1)
        assert envelope.is_protocol is True

    def test_missing_opcode_is_invalid(self) -> None:
        """Test an envelope without an opcode is rejected."""
        with pytest.raises(ValidationError):
            SocketEnvelope.from_json('{"t": "ChatMessageCreated"}')

    def test_malformed_json_is_invalid(self) -> None:
        """Test non-JSON text is rejected."""
        with pytest.raises(ValidationError):
            SocketEnvelope.from_json("not json")

    def test_to_json_uses_wire_names(self) -> None:
        """Test conversion back to the wire shape."""
        envelope = SocketEnvelope(opcode=2, message_id="abc")
        assert envelope.to_json() == {"op": 2, "s": "abc"}
