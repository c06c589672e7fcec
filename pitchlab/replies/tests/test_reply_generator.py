import pytest

from pitchlab.common.errors import CompletionError, GenerationError, ThreadNotFound
from pitchlab.common.outcome import MEMORY_FETCH_DEGRADED, PERSIST_APPEND_FAILED
from pitchlab.config.runtime_config import GenerationSettings
from pitchlab.memory.repository import InMemoryConversationMemory
from pitchlab.replies.service import (
    BASE_INSTRUCTION,
    PERSONA_MARKER,
    ReplyGenerator,
    build_system_instruction,
)


class _ReadFailingMemory(InMemoryConversationMemory):
    async def list_messages(self, thread_ref):
        raise ThreadNotFound(thread_ref)


class _AppendFailingMemory(InMemoryConversationMemory):
    async def append_assistant_message(self, thread_ref, text):
        raise RuntimeError("provider unavailable")


def test_system_instruction_appends_persona_verbatim():
    assert build_system_instruction(None) == BASE_INSTRUCTION
    assert build_system_instruction("   ") == BASE_INSTRUCTION
    persona = "You are a skeptical CFO who hates jargon."
    instruction = build_system_instruction(persona)
    assert instruction.startswith(BASE_INSTRUCTION)
    assert instruction.endswith(f"{PERSONA_MARKER}\n{persona}")


@pytest.mark.anyio
async def test_generate_reply_sends_system_then_history_and_persists(memory, completions):
    completions.replies = ["Make it quick."]
    ref = await memory.create_thread()
    await memory.append_user_message(ref, "Hi, thanks for your time")
    gen = ReplyGenerator(memory, completions, GenerationSettings(temperature=0.3, max_tokens=50))

    outcome = await gen.generate_reply(ref, persona="Busy CFO")

    assert outcome.text == "Make it quick."
    assert outcome.warnings == []
    call = completions.calls[0]
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 50
    sent = call["messages"]
    assert [m["role"] for m in sent] == ["system", "user"]
    assert sent[0]["content"].endswith("Busy CFO")
    assert sent[1] == {"role": "user", "content": "Hi, thanks for your time"}
    stored = await memory.list_messages(ref)
    assert [(m.role, m.content) for m in stored][-1] == ("assistant", "Make it quick.")
    assert all(m.role != "system" for m in stored)


@pytest.mark.anyio
async def test_history_failure_degrades_to_empty_history(completions):
    mem = _ReadFailingMemory()
    ref = await mem.create_thread()
    outcome = await ReplyGenerator(mem, completions).generate_reply(ref, persona="Curious buyer")

    assert outcome.text == "reply 1"
    assert [w.code for w in outcome.warnings] == [MEMORY_FETCH_DEGRADED]
    assert len(completions.calls[0]["messages"]) == 1


@pytest.mark.anyio
async def test_append_failure_still_returns_text(completions):
    mem = _AppendFailingMemory()
    ref = await mem.create_thread()
    outcome = await ReplyGenerator(mem, completions).generate_reply(ref)

    assert outcome.text == "reply 1"
    assert [w.code for w in outcome.warnings] == [PERSIST_APPEND_FAILED]
    assert await mem.list_messages(ref) == []


@pytest.mark.anyio
async def test_missing_completion_text_defaults_to_empty(memory, completions):
    completions.replies = [None]
    ref = await memory.create_thread()
    outcome = await ReplyGenerator(memory, completions).generate_reply(ref)
    assert outcome.text == ""


@pytest.mark.anyio
async def test_completion_failure_raises_generation_error_without_append(memory, completions):
    completions.fail("upstream 503")
    ref = await memory.create_thread()
    with pytest.raises(GenerationError) as excinfo:
        await ReplyGenerator(memory, completions).generate_reply(ref, persona="CFO persona")
    assert excinfo.value.message == "AI response failed: upstream 503"
    assert len(completions.calls) == 1
    assert await memory.list_messages(ref) == []


@pytest.mark.anyio
async def test_single_shot_reply_requires_text(memory, completions):
    gen = ReplyGenerator(memory, completions)
    messages = [{"role": "system", "content": "instructions"}, {"role": "user", "content": "hello there"}]
    completions.replies = ["fine", ""]
    assert await gen.get_ai_reply(messages) == "fine"
    with pytest.raises(GenerationError):
        await gen.get_ai_reply(messages)
    assert completions.calls[0]["messages"] == messages


@pytest.mark.anyio
async def test_unexpected_client_exception_becomes_generation_error(memory, completions):
    completions.fail_with = ValueError("bad json")
    gen = ReplyGenerator(memory, completions)
    with pytest.raises(GenerationError):
        await gen.get_ai_reply([{"role": "user", "content": "x"}])
    completions.fail_with = CompletionError("auth")
    with pytest.raises(GenerationError):
        await gen.get_ai_reply([{"role": "user", "content": "x"}])
