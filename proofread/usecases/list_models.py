from __future__ import annotations

from dataclasses import dataclass
from typing import List

from proofread.domain.models import ModelDescriptor
from proofread.domain.ports import UseCaseError
from proofread.usecases.error_mapping import map_api_error
from proofread.usecases.transform_text import ClientFactory


@dataclass
class ListModels:
    client_factory: ClientFactory

    def __call__(self, api_key: str) -> List[ModelDescriptor]:
        try:
            client = self.client_factory(api_key)
        except Exception as exc:
            raise map_api_error(exc, default_code="LIST_MODELS_FAILED") from exc
        try:
            models = client.list_models()
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(exc, default_code="LIST_MODELS_FAILED") from exc
        finally:
            client.close()
        return list(models or [])


__all__ = ["ListModels"]
