import json
import re
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from tunesmith.core.modules.llm.models import MAX_SUGGESTIONS, SuggestedTrack

# Greedy: from the first "{" to a "}" that closes the text. With several JSON
# blocks in one answer this spans all of them and the parse fails.
_TRAILING_OBJECT_RE = re.compile(r"\{.*\}\Z", re.DOTALL)


def _parse_whole_text(text: str) -> Any:
    return json.loads(text)


def _parse_trailing_object(text: str) -> Any:
    match = _TRAILING_OBJECT_RE.search(text)
    if match is None:
        raise ValueError("no trailing JSON object")
    return json.loads(match.group(0))


PARSE_STRATEGIES: tuple[Callable[[str], Any], ...] = (_parse_whole_text, _parse_trailing_object)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """
    Recover a JSON object from raw model output.

    Models often wrap the JSON in explanatory prose ("Sure! Here you go: {...}").
    The strategies are tried in order and the first one producing an object wins;
    nothing beyond these two is attempted.
    """
    content = text.strip()
    for strategy in PARSE_STRATEGIES:
        try:
            value = strategy(content)
        except ValueError:
            continue
        if isinstance(value, dict):
            return value
    return None


def parse_tracks(raw_tracks: list[Any]) -> list[SuggestedTrack]:
    """Turn the model's track entries into SuggestedTrack, skipping malformed ones."""
    tracks: list[SuggestedTrack] = []
    for item in raw_tracks:
        if not isinstance(item, dict):
            continue
        try:
            tracks.append(SuggestedTrack(title=item.get("title"), artist=item.get("artist")))
        except ValidationError:
            continue
        if len(tracks) == MAX_SUGGESTIONS:
            break
    return tracks
