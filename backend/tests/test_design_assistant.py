"""
test_design_assistant.py — Conversational turns and the AI artifact pipeline.

Uses the scripted FakeAssistantClient from conftest; coroutines are driven
with asyncio.run so no async pytest plugin is needed.

Tests cover:
  - send_message: transcript order, command application, reasoning as reply
  - Assistant failures become an inline [ERROR] message, never an exception
  - run_audit / plan_assembly: cache reuse while clean, refresh when dirty
  - Audit correction commands are applied before the report is cached
  - Sourcing: per-entry lookups, failures recorded as completed-with-nothing
  - Fabrication briefs and concept renders
  - stabilize_kit: end-to-end one-click kit
"""

import asyncio

from buildsheet import config
from buildsheet.models.drafting_schema import LocalSupplier, ShoppingOption
from buildsheet.services.design_assistant import DesignAssistant
from buildsheet.services.llm_client import AssistantError


def run(coro):
    return asyncio.run(coro)


# ===========================================================================
# Class 1: Chat turns
# ===========================================================================

class TestSendMessage:

    def test_commands_applied_and_reasoning_replied(self, assistant, fake_client, engine):
        fake_client.replies = [
            'Starting a 65% board.\ninitializeDraft("Keyboard", "65% linear")\n'
            'addPart("kb-pcb-1", 1)\naddPart("kb-sw-1", 68)'
        ]
        turn = run(assistant.send_message("Build me a keyboard"))

        assert turn.error is None
        assert [r.success for r in turn.results] == [True, True, True]
        assert turn.reply.content == "Starting a 65% board."
        assert engine.session.name == "Keyboard"
        assert [e.part.id for e in engine.session.bom] == ["kb-pcb-1", "kb-sw-1"]
        assert [m.role for m in engine.session.messages] == ["user", "assistant"]

    def test_history_excludes_current_prompt(self, assistant, fake_client):
        fake_client.replies = ["First answer.", "Second answer."]
        run(assistant.send_message("one"))
        run(assistant.send_message("two"))

        prompt, history, image = fake_client.asked[1]
        assert prompt == "two"
        assert history == ["one", "First answer."]
        assert image is None

    def test_image_forwarded(self, assistant, fake_client):
        fake_client.replies = ["Nice sketch."]
        run(assistant.send_message("What is this?", image="data:image/png;base64,AAAA"))
        assert fake_client.asked[0][2] == "data:image/png;base64,AAAA"

    def test_empty_reply_gets_fallback_text(self, assistant, fake_client):
        fake_client.replies = [""]
        turn = run(assistant.send_message("hello"))
        assert turn.reply.content == config.FALLBACK_REASONING

    def test_assistant_failure_becomes_inline_error(self, assistant, fake_client, engine):
        fake_client.replies = [AssistantError("provider unreachable")]
        turn = run(assistant.send_message("Build me a drone"))

        assert turn.error == "provider unreachable"
        last = engine.session.messages[-1]
        assert last.role == "assistant"
        assert last.is_error is True
        assert last.content == "[ERROR] provider unreachable"
        assert engine.session.bom == []

    def test_successful_change_triggers_render(self, engine, fake_client):
        fake_client.replies = ['addPart("kb-pcb-1", 1)']
        fake_client.image_url = "data:image/png;base64,BBBB"
        assistant = DesignAssistant(engine, fake_client, visualize_on_change=True)
        run(assistant.send_message("Start with the PCB"))

        assert "generate_image" in fake_client.calls
        assert engine.session.generated_images[0].url == "data:image/png;base64,BBBB"

    def test_no_render_without_successful_command(self, engine, fake_client):
        fake_client.replies = ["Just chatting."]
        assistant = DesignAssistant(engine, fake_client, visualize_on_change=True)
        run(assistant.send_message("hi"))
        assert "generate_image" not in fake_client.calls


# ===========================================================================
# Class 2: Audit and assembly plan caching
# ===========================================================================

class TestArtifacts:

    def test_audit_skipped_for_empty_bom(self, assistant, fake_client):
        assert run(assistant.run_audit()) is None
        assert fake_client.calls == []

    def test_audit_cached_until_bom_changes(self, assistant, fake_client, engine):
        engine.add_part("kb-pcb-1")
        first = run(assistant.run_audit())
        second = run(assistant.run_audit())

        assert first == second == "## Audit\nStatus: OK"
        assert fake_client.calls.count("verify") == 1

        engine.add_part("kb-sw-1", 68)
        run(assistant.run_audit())
        assert fake_client.calls.count("verify") == 2

    def test_force_bypasses_cache(self, assistant, fake_client, engine):
        engine.add_part("kb-pcb-1")
        run(assistant.run_audit())
        run(assistant.run_audit(force=True))
        assert fake_client.calls.count("verify") == 2

    def test_audit_corrections_applied_before_caching(self, assistant, fake_client, engine):
        engine.add_part("kb-pcb-1")
        fake_client.audit_text = '## Audit\nMissing switches.\naddPart("kb-sw-1", 68)'

        report = run(assistant.run_audit())

        assert report == "## Audit\nMissing switches."
        assert assistant.last_audit_corrections == 1
        assert [e.part.id for e in engine.session.bom] == ["kb-pcb-1", "kb-sw-1"]
        assert engine.session.cache_is_dirty is False

    def test_audit_failure_keeps_previous_report(self, assistant, fake_client, engine):
        engine.add_part("kb-pcb-1")
        run(assistant.run_audit())
        engine.add_part("kb-sw-1", 68)
        fake_client.audit_error = AssistantError("timeout")

        report = run(assistant.run_audit())

        assert report == "## Audit\nStatus: OK"
        assert engine.session.cache_is_dirty is True
        assert engine.session.messages[-1].content == "[ERROR] Audit failed: timeout"

    def test_plan_cached(self, assistant, fake_client, engine, sample_plan):
        engine.add_part("kb-pcb-1")
        fake_client.plan = sample_plan
        plan = run(assistant.plan_assembly())
        again = run(assistant.plan_assembly())

        assert plan.total_time == "5m"
        assert again == plan
        assert fake_client.calls.count("plan_assembly") == 1

    def test_plan_failure_returns_cached(self, assistant, fake_client, engine, sample_plan):
        engine.add_part("kb-pcb-1")
        fake_client.plan = sample_plan
        run(assistant.plan_assembly())
        engine.add_part("kb-sw-1", 68)
        fake_client.plan = None

        assert run(assistant.plan_assembly()) == sample_plan
        assert engine.session.cache_is_dirty is True


# ===========================================================================
# Class 3: Sourcing, briefs, renders
# ===========================================================================

class TestSourcing:

    def test_source_part_records_offers(self, assistant, fake_client, engine):
        entry = engine.add_part("custom-knob-cap")
        fake_client.sources = [ShoppingOption(title="Knob", url="https://shop.example/knob", source="Shop", price="$4.20")]
        fake_client.local = [LocalSupplier(name="Maker Space", address="1 Main St")]

        sourced = run(assistant.source_part(entry.instance_id))

        assert sourced.sourcing.online[0].title == "Knob"
        assert sourced.sourcing.local[0].name == "Maker Space"
        assert sourced.part.price == 4.20
        assert engine.get_sourcing_completion() == 100

    def test_lookup_returning_nothing_still_completes(self, assistant, fake_client, engine):
        entry = engine.add_part("kb-pcb-1")
        fake_client.sources = None
        fake_client.local = None
        sourced = run(assistant.source_part(entry.instance_id))
        assert sourced.sourcing.online == []
        assert engine.get_sourcing_completion() == 100

    def test_source_all_skips_sourced_entries(self, assistant, fake_client, engine):
        engine.add_part("kb-pcb-1")
        engine.add_part("kb-sw-1", 68)
        assert run(assistant.source_all()) == 2
        assert run(assistant.source_all()) == 0

    def test_source_unknown_entry(self, assistant):
        assert run(assistant.source_part("missing00")) is None


class TestBriefsAndRenders:

    def test_fabrication_brief_stored_on_entry(self, assistant, fake_client, engine):
        entry = engine.add_part("custom-knob-cap")
        brief = run(assistant.generate_fabrication_brief(entry.instance_id))
        assert brief == fake_client.brief
        assert engine.session.bom[0].fabrication_brief == fake_client.brief
        assert "brief:Custom Knob Cap" in fake_client.calls

    def test_visual_needs_a_bom(self, assistant, fake_client):
        fake_client.image_url = "data:image/png;base64,CCCC"
        assert run(assistant.generate_visual()) is None

    def test_visual_prompt_uses_requirements(self, assistant, fake_client, engine):
        engine.initialize("Drone", "5 inch freestyle")
        engine.add_part("drone-mot-xing2", 4)
        fake_client.image_url = "data:image/png;base64,CCCC"
        run(assistant.generate_visual())
        assert engine.session.generated_images[-1].prompt == "Design concept for: 5 inch freestyle"


# ===========================================================================
# Class 4: One-click kit
# ===========================================================================

class TestStabilizeKit:

    def test_empty_bom_is_not_a_kit(self, assistant):
        assert run(assistant.stabilize_kit()) is False

    def test_stabilize_produces_ready_kit(self, assistant, fake_client, engine, sample_plan):
        engine.add_part("kb-pcb-1")
        engine.add_part("kb-sw-1", 68)
        fake_client.sources = [ShoppingOption(title="Offer", price="$10")]
        fake_client.plan = sample_plan
        fake_client.image_url = "data:image/png;base64,DDDD"

        assert run(assistant.stabilize_kit()) is True
        assert assistant.kit_ready() is True
        assert engine.session.messages[-1].content.startswith("**Kit Stabilized.**")
        assert len(engine.session.generated_images) == 1

    def test_ready_kit_short_circuits(self, assistant, fake_client, engine, sample_plan):
        engine.add_part("kb-pcb-1")
        fake_client.sources = []
        fake_client.plan = sample_plan
        run(assistant.stabilize_kit())
        calls_before = list(fake_client.calls)

        assert run(assistant.stabilize_kit()) is True
        assert fake_client.calls == calls_before

    def test_audit_corrections_force_replan(self, assistant, fake_client, engine, sample_plan):
        engine.add_part("kb-pcb-1")
        fake_client.audit_text = '## Audit\nAdd switches.\naddPart("kb-sw-1", 68)'
        fake_client.plan = sample_plan

        assert run(assistant.stabilize_kit()) is True
        assert [e.part.id for e in engine.session.bom] == ["kb-pcb-1", "kb-sw-1"]
        assert engine.session.bom[1].sourcing is not None
        assert fake_client.calls.count("plan_assembly") == 1
