import time

import litellm
import structlog

from tunesmith.core.core import Service
from tunesmith.core.modules.llm.models import SuggestedTrack
from tunesmith.core.modules.llm.prompts import build_suggestion_messages, unreachable_hint
from tunesmith.core.modules.llm.utils import extract_json_object, parse_tracks
from tunesmith.errors import EmptyPromptError, InvalidModelResponseError, ProviderUnreachableError

logger = structlog.get_logger(__name__)


class LLMService(Service):
    """Turns a free-text mood description into a list of suggested tracks."""

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        config = self.core.config
        start_time = time.time()
        try:
            response = await litellm.acompletion(
                model=config.llm_model,
                messages=messages,
                api_base=config.llm_api_base,
                temperature=config.llm_temperature,
                timeout=config.llm_timeout,
                stream=False,
            )
        except (litellm.APIConnectionError, litellm.Timeout) as e:
            logger.warning("llm_provider_unreachable", model=config.llm_model, api_base=config.llm_api_base, error=str(e))
            raise ProviderUnreachableError(unreachable_hint(config.llm_api_base, config.llm_model)) from e
        except Exception as e:  # noqa: BLE001
            logger.warning("llm_request_failed", model=config.llm_model, error=str(e))
            raise InvalidModelResponseError(f"Model request failed: {e}") from e

        usage = getattr(response, "usage", None)
        logger.info(
            "llm_completion",
            model=config.llm_model,
            duration_ms=int((time.time() - start_time) * 1000),
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
        )
        return response.choices[0].message.content or ""

    async def suggest(self, prompt: str | None) -> list[SuggestedTrack]:
        """
        Ask the model for tracks matching the prompt.

        Args:
            prompt: User's free-text mood description

        Returns:
            Suggested tracks in model order, at most MAX_SUGGESTIONS
        """
        if not prompt or not prompt.strip():
            raise EmptyPromptError

        content = await self._complete(build_suggestion_messages(prompt))
        if not content.strip():
            raise InvalidModelResponseError("Model returned an empty response")

        data = extract_json_object(content)
        if data is None or not isinstance(data.get("tracks"), list):
            logger.warning("llm_invalid_response", preview=content[:120])
            raise InvalidModelResponseError("Invalid AI response")

        return parse_tracks(data["tracks"])
