"""Tests for template helpers."""

import pytest

from flexdisco.utils.templates import (
    TemplateParseError,
    parse_template,
    substitute_placeholders,
    unresolved_placeholders,
)


class TestSubstitution:
    """Test placeholder replacement."""

    def test_all_occurrences(self):
        """Test every occurrence is replaced."""
        text = "a: ${auto:host}\nb: ${auto:ip}\nc: ${auto:host}:${auto:port}\n"

        result = substitute_placeholders(text, "10.0.0.1", "80")

        assert result == "a: 10.0.0.1\nb: 10.0.0.1\nc: 10.0.0.1:80\n"
        assert unresolved_placeholders(result) == []

    def test_missing_values_left_in_place(self):
        """Test unknown values leave their placeholders."""
        result = substitute_placeholders("h: ${auto:host}\np: ${auto:port}\n", ip="10.0.0.1")
        assert unresolved_placeholders(result) == ["${auto:port}"]


class TestParseTemplate:
    """Test template parsing."""

    def test_parse(self):
        """Test a valid template."""
        probe = parse_template("name: redis\ncustom_attributes:\n  env: prod\n")

        assert probe.name == "redis"
        assert probe.custom_attributes == {"env": "prod"}

    @pytest.mark.parametrize("text", [
        "name: [unclosed",
        "- just\n- a list\n",
        "custom_attributes: [a, b]\n",
    ])
    def test_invalid(self, text):
        """Test malformed, non-mapping and mistyped templates."""
        with pytest.raises(TemplateParseError):
            parse_template(text)

    def test_name_is_optional(self):
        """Test a template without a name key."""
        probe = parse_template("host: ${auto:host}\n")

        assert probe.name is None
        assert probe.dict()["host"] == "${auto:host}"

    def test_scalar_attributes_stringified(self):
        """Test non-string attribute values are kept as text."""
        probe = parse_template(
            "name: redis\ncustom_attributes:\n  port: 6379\n  tls: false\n  ratio: 0.5\n  empty:\n"
        )

        assert probe.custom_attributes == {
            "port": "6379",
            "tls": "false",
            "ratio": "0.5",
            "empty": "",
        }
