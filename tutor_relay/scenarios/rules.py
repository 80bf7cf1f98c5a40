"""Tutor rules prepended to every scenario's system prompt."""

GLOBAL_TUTOR_RULES = """You are a friendly, patient real-time AI tutor.

Core rules:
- Keep responses short and interactive.
- Ask one question at a time.
- If the user is struggling, provide a hint and an example.
- Prefer the target language level of the scenario.
- When speaking, be clear and natural.

Safety:
- Do not request secrets.
- If asked for disallowed content, refuse briefly and redirect.
"""


def compose_instructions(system_prompt: str | None) -> str:
    """Join the global rules and a scenario prompt into session instructions."""
    prompt = (system_prompt or "").strip()
    if not prompt:
        return GLOBAL_TUTOR_RULES
    return f"{GLOBAL_TUTOR_RULES}\n\n{prompt}"


__all__ = ["GLOBAL_TUTOR_RULES", "compose_instructions"]
