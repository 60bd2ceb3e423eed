SUGGESTION_COUNT = 12

SYSTEM_PROMPT = (
    "You are a music curator. Given a prompt, return a concise JSON object with an array called tracks. "
    "Each track must have title and artist. Return ONLY JSON."
)


def build_suggestion_messages(prompt: str) -> list[dict[str, str]]:
    """Build the chat messages asking the model for a track list."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Prompt: {prompt.strip()}\nReturn {SUGGESTION_COUNT} tracks."},
    ]


def unreachable_hint(api_base: str, model: str) -> str:
    """Operator-facing remediation text for a model server that cannot be reached."""
    model_name = model.split("/", 1)[-1]
    return (
        f"Cannot reach the model server at {api_base}. Is Ollama running? "
        f"Try: `ollama serve` and `ollama pull {model_name}`."
    )
