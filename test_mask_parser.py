"""
test_mask_parser.py

Tests for the extended object mask parser.
Validates parsing of valid and invalid mask strings.
"""

import pytest

from apifilter.errors import (
    EmptyMaskError,
    MalformedMaskError,
    MissingNameError,
    UnbalancedMaskError,
    UnexpectedMaskTokenError,
)
from apifilter.mask_nodes import MaskNode, MaskProperty
from apifilter.mask_parser import MaskLexer, parse_mask


class TestValidMasks:
    """Test parsing of valid mask strings."""

    def test_simple_untyped_mask(self):
        """Parse a default mask with flat properties."""
        nodes = parse_mask("mask[id,hostname]")

        assert len(nodes) == 1
        node = nodes[0]
        assert isinstance(node, MaskNode)
        assert node.type_scope is None
        assert node.property_names == ("id", "hostname")

    def test_nested_sub_mask(self):
        """A property can carry its own bracketed sub-mask."""
        nodes = parse_mask("mask[datacenter[name,longName],id]")

        node = nodes[0]
        assert node.property_names == ("datacenter", "id")

        datacenter = node.get("datacenter")
        assert [c.name for c in datacenter.children] == ["name", "longName"]
        assert node.get("id").children == ()

    def test_deep_nesting(self):
        """Sub-masks nest to any depth."""
        nodes = parse_mask("mask[a[b[c[d]]]]")

        d = nodes[0].get("a").children[0].children[0].children[0]
        assert d == MaskProperty("d")

    def test_typed_mask(self):
        """mask(Type).prop scopes a single property to a type."""
        nodes = parse_mask("mask(SoftLayer_Hardware_Server).bandwidthAllocation")

        node = nodes[0]
        assert node.type_scope == "SoftLayer_Hardware_Server"
        assert node.property_names == ("bandwidthAllocation",)

    def test_typed_mask_with_sub_mask(self):
        """A typed property can be followed by a sub-mask."""
        nodes = parse_mask("mask(SoftLayer_Hardware).operatingSystem[version,name]")

        prop = nodes[0].get("operatingSystem")
        assert [c.name for c in prop.children] == ["version", "name"]

    def test_typed_mask_with_property_list(self):
        """mask(Type)[a,b] scopes several properties at once."""
        nodes = parse_mask("mask(SoftLayer_Ticket)[status,group]")

        assert nodes[0].type_scope == "SoftLayer_Ticket"
        assert nodes[0].property_names == ("status", "group")

    def test_dotted_untyped_mask(self):
        """mask.prop is the single-property form of mask[prop]."""
        assert parse_mask("mask.id") == parse_mask("mask[id]")

    def test_concatenated_fragments(self):
        """Fragments written back to back yield one node each."""
        nodes = parse_mask("mask[id]mask(SoftLayer_Ticket).status")

        assert len(nodes) == 2
        assert nodes[0].type_scope is None
        assert nodes[1].type_scope == "SoftLayer_Ticket"

    def test_comma_separated_fragments(self):
        """Fragments may be separated by commas."""
        nodes = parse_mask("mask[id], mask(A).x, mask(B).y")

        assert [n.type_scope for n in nodes] == [None, "A", "B"]

    def test_outer_brackets(self):
        """The bracketed multi-mask form parses to its fragments."""
        nodes = parse_mask("[mask[a,b],mask(Type).c]")

        assert len(nodes) == 2
        assert nodes[0].property_names == ("a", "b")
        assert nodes[1].type_scope == "Type"
        assert nodes[1].property_names == ("c",)

    def test_whitespace_ignored(self):
        """Whitespace between tokens is insignificant."""
        spaced = parse_mask("  mask [ createDate ,  modifyDate [ id ] ]  ")
        tight = parse_mask("mask[createDate,modifyDate[id]]")

        assert spaced == tight

    def test_duplicate_properties_collapse(self):
        """A property named twice in one fragment appears once."""
        nodes = parse_mask("mask[a,b,a]")

        assert nodes[0].property_names == ("a", "b")

    def test_duplicate_properties_merge_sub_masks(self):
        """Duplicate properties merge their sub-masks."""
        nodes = parse_mask("mask[a[p],a[q,p]]")

        a = nodes[0].get("a")
        assert [c.name for c in a.children] == ["p", "q"]

    def test_parse_is_repeatable(self):
        """Parsing the same text twice gives equal results."""
        text = "mask[id,datacenter[name]]mask(T).x"

        assert parse_mask(text) == parse_mask(text)

    def test_to_dict(self):
        """Nodes can be converted to dicts."""
        node = parse_mask("mask(T).a[b]")[0]

        assert node.to_dict() == {
            "type": "T",
            "properties": [{"name": "a", "children": [{"name": "b"}]}],
        }


class TestLexer:
    """Test tokenization."""

    def test_token_types_and_columns(self):
        """Tokens carry their type and 1-based column."""
        tokens = MaskLexer("mask(T).a").tokenize()

        assert [t.type for t in tokens] == [
            "IDENT", "LPAREN", "IDENT", "RPAREN", "DOT", "IDENT", "EOF"
        ]
        assert [t.column for t in tokens] == [1, 5, 6, 7, 8, 9, 10]

    def test_identifiers_allow_digits_and_underscores(self):
        """Names may contain digits and underscores after the first character."""
        tokens = MaskLexer("SoftLayer_Hardware_Server2").tokenize()

        assert tokens[0].value == "SoftLayer_Hardware_Server2"


class TestInvalidMasks:
    """Test parsing of invalid masks produces proper errors."""

    def test_empty_string(self):
        """Empty mask text is rejected."""
        with pytest.raises(EmptyMaskError):
            parse_mask("")

    def test_blank_string(self):
        """Whitespace-only mask text is rejected."""
        with pytest.raises(EmptyMaskError):
            parse_mask("   ")

    def test_non_string(self):
        """Non-string input is rejected."""
        with pytest.raises(MalformedMaskError) as exc_info:
            parse_mask(None)

        assert "must be a string" in str(exc_info.value)

    def test_unclosed_bracket(self):
        """An unclosed '[' is reported at its column."""
        with pytest.raises(UnbalancedMaskError) as exc_info:
            parse_mask("mask[a")

        assert exc_info.value.delimiter == "["
        assert exc_info.value.column == 5
        assert "Unclosed '['" in str(exc_info.value)

    def test_extra_closing_bracket(self):
        """A stray ']' is reported at its column."""
        with pytest.raises(UnbalancedMaskError) as exc_info:
            parse_mask("mask[a]]")

        assert exc_info.value.delimiter == "]"
        assert exc_info.value.column == 8
        assert "Unmatched ']'" in str(exc_info.value)

    def test_mismatched_delimiters(self):
        """A '(' closed by ']' reports the unclosed '('."""
        with pytest.raises(UnbalancedMaskError) as exc_info:
            parse_mask("mask(Type]")

        assert exc_info.value.delimiter == "("
        assert exc_info.value.column == 5

    def test_unclosed_paren(self):
        """An unclosed '(' is rejected."""
        with pytest.raises(UnbalancedMaskError):
            parse_mask("mask(Type.a")

    def test_empty_property_list(self):
        """mask[] has no property name."""
        with pytest.raises(MissingNameError) as exc_info:
            parse_mask("mask[]")

        assert exc_info.value.what == "property"
        assert exc_info.value.column == 6

    def test_trailing_comma(self):
        """A trailing comma leaves a property without a name."""
        with pytest.raises(MissingNameError) as exc_info:
            parse_mask("mask[a,]")

        assert exc_info.value.column == 8

    def test_empty_nested_sub_mask(self):
        """An empty sub-mask has no property name."""
        with pytest.raises(MissingNameError):
            parse_mask("mask[a[]]")

    def test_missing_type_name(self):
        """mask() has no type name."""
        with pytest.raises(MissingNameError) as exc_info:
            parse_mask("mask().a")

        assert exc_info.value.what == "type"

    def test_missing_dotted_property(self):
        """mask(Type). has no property name."""
        with pytest.raises(MissingNameError):
            parse_mask("mask(Type).")

    def test_typed_mask_without_property(self):
        """mask(Type) alone names no property."""
        with pytest.raises(UnexpectedMaskTokenError) as exc_info:
            parse_mask("mask(Type)")

        assert "Expected '[' or '.'" in str(exc_info.value)

    def test_fragment_must_start_with_mask(self):
        """Fragments start with the mask keyword."""
        with pytest.raises(UnexpectedMaskTokenError) as exc_info:
            parse_mask("fields[a]")

        assert exc_info.value.found == "fields"
        assert exc_info.value.column == 1

    def test_unexpected_character(self):
        """Characters outside the mask language are rejected."""
        with pytest.raises(UnexpectedMaskTokenError) as exc_info:
            parse_mask("mask[a-b]")

        assert exc_info.value.found == "-"
        assert exc_info.value.column == 7

    @pytest.mark.parametrize("source, found, column", [
        ("mask[a²]", "²", 7),
        ("mask[é]", "é", 6),
        ("mask(Typ٣).a", "٣", 9),
    ])
    def test_non_ascii_names_rejected(self, source, found, column):
        """Names are ASCII letters, digits and underscores only."""
        with pytest.raises(UnexpectedMaskTokenError) as exc_info:
            parse_mask(source)

        assert exc_info.value.found == found
        assert exc_info.value.column == column

    def test_trailing_comma_between_fragments(self):
        """A comma must be followed by another fragment."""
        with pytest.raises(UnexpectedMaskTokenError):
            parse_mask("mask[a],")

    def test_text_after_outer_brackets(self):
        """Nothing may follow the bracketed multi-mask form."""
        with pytest.raises(UnexpectedMaskTokenError) as exc_info:
            parse_mask("[mask[a]] mask[b]")

        assert "end of mask" in str(exc_info.value)

    def test_all_parse_errors_are_malformed_mask_errors(self):
        """Every parser error shares the MalformedMaskError base."""
        for text in ["", "mask[a", "mask[]", "mask(T)", "mask[a-b]"]:
            with pytest.raises(MalformedMaskError):
                parse_mask(text)
