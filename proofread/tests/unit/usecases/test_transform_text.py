from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from proofread.adapters.api_errors import ProviderError, TransportError
from proofread.adapters.openai_rest import OpenAIRestAdapter
from proofread.domain.models import ModelDescriptor, Prompt
from proofread.domain.ports import PromptNotFoundError, UseCaseError
from proofread.usecases.list_models import ListModels
from proofread.usecases.transform_text import TransformText

PROMPTS = (
    Prompt(id="fix-grammar", display_name="Fix grammar", prompt_text="Fix grammar and spelling."),
    Prompt(id="formal", display_name="Make formal", prompt_text="Rewrite formally."),
)


class _ClientStub:
    def __init__(self, result=None, error=None, models=None) -> None:
        self.result = result
        self.error = error
        self.models = models or []
        self.calls = []
        self.close_calls = 0

    def complete(self, model, instruction, text):
        self.calls.append((model, instruction, text))
        if self.error is not None:
            raise self.error
        return self.result

    def list_models(self):
        if self.error is not None:
            raise self.error
        return self.models

    def close(self):
        self.close_calls += 1


def _factory(client):
    return MagicMock(return_value=client)


def test_transform_sends_prompt_instruction_and_text() -> None:
    client = _ClientStub(result="Hello world")
    factory = _factory(client)
    uc = TransformText(factory)

    result = uc("Hello wrld", "fix-grammar", PROMPTS, "sk-test", "gpt-4o")

    assert result == "Hello world"
    factory.assert_called_once_with("sk-test")
    assert client.calls == [("gpt-4o", "Fix grammar and spelling.", "Hello wrld")]


def test_unknown_prompt_fails_before_network() -> None:
    factory = MagicMock()
    uc = TransformText(factory)

    with pytest.raises(PromptNotFoundError) as excinfo:
        uc("text", "nope", PROMPTS, "sk-test", "gpt-4o")

    assert excinfo.value.code == "PROMPT_NOT_FOUND"
    factory.assert_not_called()


@pytest.mark.parametrize("result", [None, ""])
def test_empty_answer_returns_none(result) -> None:
    uc = TransformText(_factory(_ClientStub(result=result)))

    assert uc("text", "formal", PROMPTS, "sk-test", "gpt-4o") is None


@pytest.mark.parametrize(
    "error, code",
    [
        (TransportError("Timeout contacting host"), "TRANSPORT_ERROR"),
        (ProviderError("ctx", status=429), "RATE_LIMITED"),
        (ValueError("bad"), "TRANSFORM_FAILED"),
    ],
)
def test_adapter_failures_are_mapped(error, code) -> None:
    uc = TransformText(_factory(_ClientStub(error=error)))

    with pytest.raises(UseCaseError) as excinfo:
        uc("text", "formal", PROMPTS, "sk-test", "gpt-4o")

    assert excinfo.value.code == code
    assert excinfo.value.__cause__ is error


def test_client_factory_failure_is_mapped() -> None:
    uc = TransformText(MagicMock(side_effect=ValueError("OpenAIRestAdapter requires an API key")))

    with pytest.raises(UseCaseError) as excinfo:
        uc("text", "formal", PROMPTS, "", "gpt-4o")

    assert excinfo.value.code == "TRANSFORM_FAILED"


def test_list_models_returns_descriptors() -> None:
    models = [ModelDescriptor("gpt-4o"), ModelDescriptor("gpt-4o-mini")]
    uc = ListModels(_factory(_ClientStub(models=models)))

    assert uc("sk-test") == models


def test_list_models_maps_errors() -> None:
    uc = ListModels(_factory(_ClientStub(error=TransportError("Could not reach host"))))

    with pytest.raises(UseCaseError) as excinfo:
        uc("sk-test")

    assert excinfo.value.code == "TRANSPORT_ERROR"


def test_client_is_closed_once_per_call() -> None:
    clients = []

    def factory(api_key):
        client = _ClientStub(result="ok")
        clients.append(client)
        return client

    uc = TransformText(factory)
    for _ in range(3):
        uc("text", "formal", PROMPTS, "sk-test", "gpt-4o")

    assert [client.close_calls for client in clients] == [1, 1, 1]


def test_client_is_closed_after_failure() -> None:
    client = _ClientStub(error=TransportError("Timeout contacting host"))
    uc = TransformText(_factory(client))

    with pytest.raises(UseCaseError):
        uc("text", "formal", PROMPTS, "sk-test", "gpt-4o")

    assert client.close_calls == 1


def test_list_models_closes_client() -> None:
    ok = _ClientStub(models=[ModelDescriptor("gpt-4o")])
    failing = _ClientStub(error=ProviderError("ctx", status=500))

    ListModels(_factory(ok))("sk-test")
    with pytest.raises(UseCaseError):
        ListModels(_factory(failing))("sk-test")

    assert (ok.close_calls, failing.close_calls) == (1, 1)


def test_real_adapter_sessions_are_closed(monkeypatch) -> None:
    sessions = []

    class _Session:
        def __init__(self) -> None:
            self.closed = 0
            sessions.append(self)

        def post(self, url, **kwargs):
            return MagicMock(status_code=200, json=lambda: {"choices": [{"message": {"content": "done"}}]})

        def close(self) -> None:
            self.closed += 1

    monkeypatch.setattr("proofread.adapters.http_client.requests.Session", _Session)
    uc = TransformText(lambda api_key: OpenAIRestAdapter(api_key))

    for _ in range(3):
        assert uc("text", "formal", PROMPTS, "sk-test", "gpt-4o") == "done"

    assert [session.closed for session in sessions] == [1, 1, 1]
