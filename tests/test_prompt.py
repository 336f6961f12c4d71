import pytest

from core.errors import UpstreamError
from core.prompt import PREAMBLE, TURN_MARKER, compose_prompt, extract_answer, trim_reply


def test_prompt_contains_message_and_context():
    msg = "Who directed   Inception?\nThanks"
    prompt = compose_prompt("CONTEXT BLOCK", msg)
    assert msg in prompt
    assert "CONTEXT BLOCK" in prompt
    assert prompt.startswith(PREAMBLE)
    assert prompt.rstrip().endswith(TURN_MARKER)
    assert f"User question: {msg}" in prompt


def test_prompt_order():
    prompt = compose_prompt("CTX", "hello")
    assert prompt.index("Do not fabricate") < prompt.index("CTX") < prompt.index("hello")


def test_extract_after_turn_marker():
    payload = [{"generated_text": "blah blah Assistant:   Answer text  \n"}]
    assert extract_answer(payload, "q") == "Answer text"


def test_extract_uses_last_turn_marker():
    text = "prompt ... Assistant: echoed\nUser question: q\nAssistant: Final answer"
    assert trim_reply(text, "q") == "Final answer"


def test_extract_after_echoed_question():
    m = "Which film is by Bong Joon Ho?"
    payload = [{"generated_text": f"User question: {m} Here's the info "}]
    assert extract_answer(payload, m) == "Here's the info"


def test_extract_plain_text():
    assert extract_answer([{"generated_text": "  Parasite  "}], "q") == "Parasite"


@pytest.mark.parametrize(
    "payload",
    [[], {}, None, [{}], [{"generated_text": 3}], {"generated_text": "x"}],
)
def test_extract_malformed_payload(payload):
    with pytest.raises(UpstreamError):
        extract_answer(payload, "q")
