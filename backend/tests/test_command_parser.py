"""
test_command_parser.py — Unit tests for the assistant reply command parser.

Tests cover:
  - The three call shapes: initializeDraft, addPart, removePart
  - Argument quoting: double, single, bare tokens; quoted integers
  - Ordering: commands come back in the order they appear in the reply
  - Noise tolerance: tool-call headings, code fences, JSON arrays, semicolons
  - Degradation: empty reply, prose-only reply, malformed calls left in place

All tests are pure unit tests; no storage or LLM provider required.
"""

import pytest

from buildsheet import config
from buildsheet.models.commands import AddPart, InitDraft, RemovePart
from buildsheet.services.command_parser import CommandParser, parse


@pytest.fixture
def parser():
    return CommandParser()


# ===========================================================================
# Class 1: Call shapes
# ===========================================================================

class TestCallShapes:
    """Each grammar entry produces the matching typed command."""

    def test_round_trip_three_commands_in_order(self, parser):
        """initializeDraft + two addPart calls → 3 commands, none left in the reasoning."""
        text = 'initializeDraft("Drone","fly") addPart("motor-a",4) addPart("esc-b",4)'
        reply = parser.parse(text)

        assert [c.kind for c in reply.commands] == ["init_draft", "add_part", "add_part"]
        init, motor, esc = reply.commands
        assert init == InitDraft(name="Drone", requirements="fly")
        assert motor == AddPart(part_id="motor-a", qty=4)
        assert esc == AddPart(part_id="esc-b", qty=4)
        for call in ('initializeDraft("Drone","fly")', 'addPart("motor-a",4)', 'addPart("esc-b",4)'):
            assert call not in reply.reasoning

    def test_initialize_without_requirements(self, parser):
        reply = parser.parse('initializeDraft("Macro Pad")')
        assert reply.commands == [InitDraft(name="Macro Pad", requirements="")]

    def test_add_part_default_quantity_is_one(self, parser):
        reply = parser.parse('addPart("kb-case-1")')
        assert reply.commands == [AddPart(part_id="kb-case-1", qty=1)]

    def test_remove_part(self, parser):
        reply = parser.parse("Dropping the spare. removePart('a1b2c3d4e')")
        assert reply.commands == [RemovePart(instance_id="a1b2c3d4e")]
        assert reply.reasoning == "Dropping the spare."

    def test_module_level_parse_uses_default_grammar(self):
        reply = parse('addPart("kb-sw-1", 68)')
        assert reply.commands == [AddPart(part_id="kb-sw-1", qty=68)]


# ===========================================================================
# Class 2: Argument quoting
# ===========================================================================

class TestQuoting:
    """Arguments accept double quotes, single quotes or no quotes at all."""

    def test_single_quotes(self, parser):
        reply = parser.parse("addPart('kb-sw-1', 10)")
        assert reply.commands == [AddPart(part_id="kb-sw-1", qty=10)]

    def test_bare_tokens(self, parser):
        reply = parser.parse("addPart(kb-pcb-1, 2)")
        assert reply.commands == [AddPart(part_id="kb-pcb-1", qty=2)]

    def test_quoted_integer_quantity(self, parser):
        reply = parser.parse("addPart('kb-sw-1', '68')")
        assert reply.commands[0].qty == 68

    def test_whitespace_inside_parentheses(self, parser):
        reply = parser.parse('addPart(  "kb-sw-1" ,   3  )')
        assert reply.commands == [AddPart(part_id="kb-sw-1", qty=3)]

    def test_trailing_semicolon_is_consumed(self, parser):
        reply = parser.parse('Adding it now.\naddPart("kb-sw-1", 3);')
        assert reply.reasoning == "Adding it now."


# ===========================================================================
# Class 3: Ordering and repetition
# ===========================================================================

class TestOrdering:

    def test_first_seen_order_across_call_shapes(self, parser):
        text = 'removePart("abc123def")\naddPart("kb-case-1", 1)\nremovePart("zzz999yyy")'
        reply = parser.parse(text)
        assert [c.kind for c in reply.commands] == ["remove_part", "add_part", "remove_part"]
        assert reply.commands[2].instance_id == "zzz999yyy"

    def test_repeated_add_part_calls_all_kept(self, parser):
        reply = parser.parse('addPart("kb-sw-1", 30) addPart("kb-sw-1", 38)')
        assert [c.qty for c in reply.commands] == [30, 38]

    def test_only_first_initialize_is_used(self, parser):
        """A reply should pivot the design at most once."""
        reply = parser.parse('initializeDraft("A", "first") initializeDraft("B", "second")')
        inits = [c for c in reply.commands if isinstance(c, InitDraft)]
        assert len(inits) == 1
        assert inits[0].name == "A"

    def test_repeated_initialize_is_cut_from_reasoning(self, parser):
        reply = parser.parse('Pivoting.\ninitializeDraft("A", "first")\ninitializeDraft("B", "second")\nDone.')
        assert "initializeDraft" not in reply.reasoning
        assert reply.reasoning == "Pivoting.\n\nDone."


# ===========================================================================
# Class 4: Noisy assistant output
# ===========================================================================

class TestNoiseTolerance:
    """Scaffolding the assistant wraps calls in is scrubbed from the reasoning."""

    def test_fenced_block_with_heading(self, parser):
        text = (
            "I've drafted the keyboard core.\n\n"
            "### Tool Calls:\n"
            "```javascript\n"
            'addPart("kb-pcb-1", 1);\n'
            'addPart("kb-sw-1", 68);\n'
            "```\n"
            "Enjoy the build."
        )
        reply = parser.parse(text)

        assert len(reply.commands) == 2
        assert "```" not in reply.reasoning
        assert "Tool Calls" not in reply.reasoning
        assert reply.reasoning.startswith("I've drafted the keyboard core.")
        assert reply.reasoning.endswith("Enjoy the build.")
        assert "\n\n\n" not in reply.reasoning

    def test_fenced_block_with_comment_line(self, parser):
        """Comment lines between calls go with them; no stray fence is left behind."""
        text = (
            "Sure.\n\n"
            "### Tool Calls\n"
            "```\n"
            'addPart("kb-pcb-1", 1);\n'
            "// add switches\n"
            'addPart("kb-sw-1", 68);\n'
            "```\n"
            "Done."
        )
        reply = parser.parse(text)

        assert [c.part_id for c in reply.commands] == ["kb-pcb-1", "kb-sw-1"]
        assert reply.reasoning == "Sure.\n\nDone."

    def test_bold_tool_code_heading(self, parser):
        text = "Switching to a tactile board.\n**Tool Code:**\naddPart(\"kb-sw-1\", 68)"
        reply = parser.parse(text)
        assert reply.reasoning == "Switching to a tactile board."

    def test_json_tool_array_line(self, parser):
        text = 'Done.\n"tool_calls": [addPart("kb-sw-1", 10)]'
        reply = parser.parse(text)
        assert reply.commands == [AddPart(part_id="kb-sw-1", qty=10)]
        assert reply.reasoning == "Done."

    def test_prose_mentioning_keyword_without_call_is_untouched(self, parser):
        text = "I can use addPart for the switches if you want."
        reply = parser.parse(text)
        assert reply.commands == []
        assert reply.reasoning == text

    def test_code_fence_without_commands_survives(self, parser):
        text = 'Wiring:\n```\nVCC -> 5V\n```\naddPart("kb-pcb-1")'
        reply = parser.parse(text)
        assert "VCC -> 5V" in reply.reasoning
        assert len(reply.commands) == 1


# ===========================================================================
# Class 5: Degradation
# ===========================================================================

class TestDegradation:
    """Parsing never raises and never loses the assistant's text."""

    @pytest.mark.parametrize("text", ["", "   \n\t  ", None])
    def test_empty_reply_gets_fallback_reasoning(self, parser, text):
        reply = parser.parse(text)
        assert reply.commands == []
        assert reply.reasoning == config.FALLBACK_REASONING

    def test_prose_only_returned_unchanged(self, parser):
        text = "  A 65% board needs a PCB, a plate and switches.\n\nWant me to draft it?  "
        reply = parser.parse(text)
        assert reply.commands == []
        assert reply.reasoning == text

    def test_non_numeric_quantity_is_not_a_call(self, parser):
        text = 'addPart("kb-pcb-1", four)'
        reply = parser.parse(text)
        assert reply.commands == []
        assert reply.reasoning == text

    def test_unclosed_call_left_in_text(self, parser):
        text = 'addPart("kb-pcb-1", 1 and then some'
        reply = parser.parse(text)
        assert reply.commands == []
        assert reply.reasoning == text

    def test_malformed_call_next_to_valid_one(self, parser):
        reply = parser.parse('addPart("kb-pcb-1", four) addPart("kb-case-1", 1)')
        assert reply.commands == [AddPart(part_id="kb-case-1", qty=1)]
        assert 'addPart("kb-pcb-1", four)' in reply.reasoning

    def test_identifier_prefix_does_not_match(self, parser):
        reply = parser.parse('readdPart("kb-pcb-1")')
        assert reply.commands == []
