import pytest

from doppel_twin.dialogue import DialogueStreamer, FragmentStream
from doppel_twin.errors import DialogueFailure
from doppel_twin.schemas import ChatTurn, PersonalityDescriptor
from doppel_twin.twin_prompts import UNFAMILIAR_TOPIC_RULE, build_dialogue_prompt

TWIN = PersonalityDescriptor(
    interests=["war films", "drama"],
    style="dry and thoughtful",
    traits=["curious"],
    personality_insight="A reflective cinephile.",
)


def test_prompt_embeds_profile_and_history():
    prompt = build_dialogue_prompt(
        TWIN,
        "Sam",
        "What should I watch tonight?",
        [ChatTurn(role="user", content="hi"), ChatTurn(role="assistant", content="hey"), "raw line"],
    )
    assert "roleplaying as Sam" in prompt
    assert "Key Interests: war films, drama" in prompt
    assert "Communication Style: dry and thoughtful" in prompt
    assert "A reflective cinephile." in prompt
    assert prompt.index("User: hi") < prompt.index("Sam: hey") < prompt.index("raw line")
    assert prompt.rstrip().endswith("What should I watch tonight?")


def test_prompt_tells_twin_to_admit_unknown_topics():
    assert not any("music" in i for i in TWIN.interests)
    prompt = build_dialogue_prompt(TWIN, "Sam", "What music do you like?")
    assert UNFAMILIAR_TOPIC_RULE in prompt
    assert "acknowledge" in UNFAMILIAR_TOPIC_RULE


@pytest.mark.anyio
async def test_stream_yields_fragments_in_order(fake_llm):
    llm = fake_llm(fragments=["Hel", "", "lo", " there"])
    streamer = DialogueStreamer(llm, model="test-model")

    fragments = [f async for f in streamer.stream(TWIN, "Sam", "hi")]

    assert fragments == ["Hel", "lo", " there"]
    call = llm.stream_calls[0]
    assert call["model"] == "test-model"
    assert len(call["messages"]) == 1
    assert call["messages"][0]["role"] == "user"


@pytest.mark.anyio
async def test_each_stream_is_a_new_backend_call(fake_llm):
    llm = fake_llm(fragments=["a", "b"])
    streamer = DialogueStreamer(llm)

    assert await streamer.reply(TWIN, "Sam", "hi") == "ab"
    assert await streamer.reply(TWIN, "Sam", "hi again") == "ab"
    assert len(llm.stream_calls) == 2


@pytest.mark.anyio
async def test_stream_is_forward_only(fake_llm):
    stream = DialogueStreamer(fake_llm(fragments=["a"])).stream(TWIN, "Sam", "hi")
    assert [f async for f in stream] == ["a"]
    assert [f async for f in stream] == []


@pytest.mark.anyio
async def test_backend_failure_after_partial_reply(fake_llm):
    llm = fake_llm(fragments=["partial"], stream_error=RuntimeError("connection reset"))
    received = []
    with pytest.raises(DialogueFailure, match="connection reset"):
        async for f in DialogueStreamer(llm).stream(TWIN, "Sam", "hi"):
            received.append(f)
    assert received == ["partial"]


@pytest.mark.anyio
async def test_early_close_stops_producer(fake_llm):
    stream = DialogueStreamer(fake_llm(fragments=["a", "b", "c"])).stream(TWIN, "Sam", "hi")
    assert await stream.__anext__() == "a"
    await stream.aclose()
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


@pytest.mark.anyio
async def test_early_close_releases_backend_source():
    state = {"closed": False}

    async def source():
        try:
            for part in ["a", "b", "c"]:
                yield part
        finally:
            state["closed"] = True

    stream = FragmentStream(source())
    assert await stream.__anext__() == "a"
    await stream.aclose()
    assert state["closed"] is True
