"""Tests for the generation invoker and upstream error classification."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from foliogen.completeness import assess
from foliogen.config import Settings
from foliogen.errors import AUTH, MALFORMED_REQUEST, RATE_LIMIT, TRANSIENT, UpstreamError, classify_upstream
from foliogen.fusion import fallback_brief
from foliogen.invoker import GenerationInvoker, clean_response
from foliogen.prompts import SYSTEM_PROMPT


# ── clean_response ───────────────────────────────────────────────────────────


def test_clean_response_strips_fences():
    assert clean_response("```html\n<!DOCTYPE html><html></html>\n```") == "<!DOCTYPE html><html></html>"


def test_clean_response_keeps_unclosed_fence_body():
    assert clean_response("```html\n<!DOCTYPE html><html><body>") == "<!DOCTYPE html><html><body>"


def test_clean_response_drops_short_preamble():
    raw = "Here is your portfolio:\n\n<!DOCTYPE html><html></html>"
    assert clean_response(raw) == "<!DOCTYPE html><html></html>"


def test_clean_response_keeps_long_lead_in():
    raw = "x" * 400 + "<html></html>"
    assert clean_response(raw) == raw


def test_clean_response_leaves_fragments_alone():
    assert clean_response("  </section></main></body></html> ") == "</section></main></body></html>"


# ── classify_upstream ────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "exc, kind",
    [
        (SimpleNamespace(code=429), RATE_LIMIT),
        (SimpleNamespace(code=403), AUTH),
        (SimpleNamespace(code=400), MALFORMED_REQUEST),
        (SimpleNamespace(code=503), TRANSIENT),
        (RuntimeError("RESOURCE_EXHAUSTED: quota"), RATE_LIMIT),
        (RuntimeError("API key not valid"), AUTH),
        (ValueError("INVALID_ARGUMENT: bad part"), MALFORMED_REQUEST),
        (TimeoutError("deadline exceeded"), TRANSIENT),
    ],
)
def test_classify_upstream(exc, kind):
    assert classify_upstream(exc) == kind


def test_from_exception_keeps_cause():
    cause = ConnectionResetError("reset by peer")
    err = UpstreamError.from_exception(cause)
    assert err.kind == TRANSIENT
    assert err.cause is cause
    assert UpstreamError.from_exception(err) is err


# ── GenerationInvoker ────────────────────────────────────────────────────────


def test_generate_sends_prompt_images_and_config(settings, profile, red_image, make_client):
    profile.reference_images = [red_image]
    client = make_client(["```html\n<!DOCTYPE html><html></html>\n```"])
    text = GenerationInvoker(settings, client=client).generate(fallback_brief(), profile)

    assert text == "<!DOCTYPE html><html></html>"
    call = client.models.generate_content.call_args
    assert call.kwargs["model"] == settings.generation_model
    config = call.kwargs["config"]
    assert config.system_instruction == SYSTEM_PROMPT
    assert config.max_output_tokens == settings.max_output_tokens
    # prompt + one (label, bytes) pair
    assert len(call.kwargs["contents"]) == 3


def test_generate_without_images_sends_plain_text(settings, profile, make_client):
    client = make_client(["<html></html>"])
    GenerationInvoker(settings, client=client).generate(fallback_brief(), profile)
    contents = client.models.generate_content.call_args.kwargs["contents"]
    assert isinstance(contents, str)
    assert "project_1_final_1" in contents
    assert "[PROJECT_2_OVERVIEW]" in contents


def test_continue_from_embeds_partial(settings, profile, make_client):
    partial = assess("<!DOCTYPE html><html><head></head><body>" + "<p>copy</p>" * 40)
    client = make_client(["</body></html>"])
    GenerationInvoker(settings, client=client).continue_from(partial, fallback_brief(), profile)

    prompt = client.models.generate_content.call_args.kwargs["contents"]
    assert partial.raw_text in prompt
    assert "---START OF INCOMPLETE HTML---" in prompt
    assert prompt.rstrip().endswith("ending with </html>.")


def test_sdk_errors_become_upstream_errors(settings, profile, make_client):
    client = make_client([RuntimeError("503 UNAVAILABLE: model overloaded")])
    with pytest.raises(UpstreamError) as info:
        GenerationInvoker(settings, client=client).generate(fallback_brief(), profile)
    assert info.value.kind == TRANSIENT


def test_empty_response_is_transient(settings, profile, make_client):
    client = make_client(["   "])
    with pytest.raises(UpstreamError) as info:
        GenerationInvoker(settings, client=client).generate(fallback_brief(), profile)
    assert info.value.kind == TRANSIENT


def test_missing_api_key_is_auth_error(profile):
    with pytest.raises(UpstreamError) as info:
        GenerationInvoker(Settings()).generate(fallback_brief(), profile)
    assert info.value.kind == AUTH
