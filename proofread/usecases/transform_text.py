from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from proofread.domain.models import ModelId, Prompt, PromptId, find_prompt
from proofread.domain.ports import PromptNotFoundError, TransformPort, UseCaseError
from proofread.usecases.error_mapping import map_api_error

ClientFactory = Callable[[str], TransformPort]


@dataclass
class TransformText:
    """Resolve a prompt and run one completion with it.

    ``client_factory`` builds a provider client for an API key; a fresh
    client per call keeps worker threads from sharing a session.
    """

    client_factory: ClientFactory
    _log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__), repr=False)

    def __call__(
        self,
        text: str,
        prompt_id: PromptId,
        prompts: Iterable[Prompt],
        api_key: str,
        model: ModelId,
    ) -> Optional[str]:
        """Return transformed text, or ``None`` for an empty provider answer.

        Raises:
            UseCaseError: ``PROMPT_NOT_FOUND`` before any network call, or the
                mapped adapter failure.
        """
        prompt = find_prompt(tuple(prompts), prompt_id)
        if prompt is None:
            raise PromptNotFoundError(prompt_id)

        try:
            client = self.client_factory(api_key)
        except Exception as exc:
            raise map_api_error(exc, default_code="TRANSFORM_FAILED") from exc
        try:
            result = client.complete(model, prompt.prompt_text, text)
        except UseCaseError:
            raise
        except Exception as exc:
            self._log.warning("Transform with prompt '%s' failed: %s", prompt_id, exc)
            raise map_api_error(exc, default_code="TRANSFORM_FAILED") from exc
        finally:
            client.close()

        if not result:
            self._log.info("Empty response for prompt '%s' (model %s)", prompt_id, model)
            return None
        return result


__all__ = ["ClientFactory", "TransformText"]
