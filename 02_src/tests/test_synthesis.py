"""Tests for SynthesisRequester."""

import pytest

from council.errors import ValidationError
from council.models import PanelResult, StreamStatus, Topic
from council.synthesis import SYNTHESIS_INSTRUCTION, SynthesisRequester, build_synthesis_prompt

SYNTH_MODEL = "anthropic/claude-3.5-sonnet"


@pytest.fixture
def requester(fake_streamer, event_bus):
    return SynthesisRequester(fake_streamer, event_bus, SYNTH_MODEL)


class TestBuildSynthesisPrompt:
    """Tests for build_synthesis_prompt()."""

    def test_single_result_embedded_verbatim(self):
        """Display name and full text appear verbatim."""
        text = "Line one.\n\nLine two with `code`."
        prompt = build_synthesis_prompt([PanelResult("GPT-4o", text)])

        assert "[Response from GPT-4o]:\n" + text in prompt
        assert prompt.endswith(SYNTHESIS_INSTRUCTION)

    def test_results_kept_in_order_and_separated(self):
        """Each result is labeled and separated from the next."""
        prompt = build_synthesis_prompt(
            [PanelResult("A", "alpha"), PanelResult("B", "beta")]
        )
        assert prompt.index("[Response from A]") < prompt.index("[Response from B]")
        assert "alpha\n\n---\n\n[Response from B]" in prompt

    def test_original_prompt_included(self):
        """The user's prompt leads when known."""
        prompt = build_synthesis_prompt([PanelResult("A", "x")], "Why is the sky blue?")
        assert prompt.startswith("[Original Prompt]:\nWhy is the sky blue?")

    def test_instruction_covers_goals(self):
        """The instruction asks to combine, correct and be comprehensive."""
        lowered = SYNTHESIS_INSTRUCTION.lower()
        assert "combine the best insights" in lowered
        assert "correct any errors" in lowered
        assert "comprehensive" in lowered and "coherent" in lowered


class TestSynthesize:
    """Tests for SynthesisRequester.synthesize()."""

    @pytest.mark.asyncio
    async def test_no_results_rejected_without_call(self, requester, fake_streamer):
        """Zero completed panels is a validation error and no network call."""
        with pytest.raises(ValidationError):
            await requester.synthesize([])
        assert fake_streamer.calls == []
        assert requester.state.status is StreamStatus.IDLE

    @pytest.mark.asyncio
    async def test_single_call_to_synthesis_model(self, requester, fake_streamer):
        """Exactly one call goes to the synthesis model with web search off."""
        fake_streamer.replies[SYNTH_MODEL] = "Combined answer."

        state = await requester.synthesize([PanelResult("GPT-4o", "Four.")])

        assert len(fake_streamer.calls) == 1
        call = fake_streamer.calls[0]
        assert call.model_id == SYNTH_MODEL
        assert call.web_search is False
        assert len(call.messages) == 1
        assert call.messages[0].role.value == "user"
        assert "[Response from GPT-4o]:\nFour." in call.messages[0].content

        assert state.status is StreamStatus.DONE
        assert state.accumulated_text == "Combined answer."
        assert requester.state == state

    @pytest.mark.asyncio
    async def test_error_reported_in_slot(self, make_streamer, event_bus):
        """A transport failure ends the synthesis slot in error."""
        streamer = make_streamer(errors={SYNTH_MODEL: "API error: 503 - busy"})
        requester = SynthesisRequester(streamer, event_bus, SYNTH_MODEL)

        state = await requester.synthesize([PanelResult("A", "x")])

        assert state.status is StreamStatus.ERROR
        assert state.error_detail == "API error: 503 - busy"
        assert not requester.busy

    @pytest.mark.asyncio
    async def test_snapshots_published(self, requester, event_bus):
        """Synthesis progress is published on its own topic."""
        seen = []

        async def handler(message):
            seen.append(message.payload["state"].status)

        event_bus.subscribe(Topic.SYNTHESIS, handler)
        await requester.synthesize([PanelResult("A", "x")])

        assert seen[0] is StreamStatus.LOADING
        assert seen[-1] is StreamStatus.DONE
