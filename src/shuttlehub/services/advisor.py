"""Session advice from Claude.

The advisor gets a one-line summary of the most recent sessions and returns
free text. The text is opaque: it is displayed as is and never parsed.
Missing credentials, API failures and empty replies all produce a fixed
fallback message instead of an error.
"""

from collections.abc import Sequence

import anthropic

from shuttlehub import get_logger
from shuttlehub.models.session import Session

logger = get_logger(__name__)

RECENT_SESSION_COUNT = 3

NO_SESSIONS_MESSAGE = "No sessions yet. Create your first badminton session to get started!"
FALLBACK_MESSAGE = "Advice is not available right now. Keep playing!"
EMPTY_REPLY_MESSAGE = "Could not generate advice, please try again later."

SYSTEM_PROMPT = (
    "You are a practical assistant for a social sports club. "
    "Your answers are light-hearted but actionable. Reply as a Markdown list."
)

ADVICE_PROMPT = """You are the senior organiser of a badminton club. Based on the summary of recent sessions below, give 3 short, clear suggestions about session frequency, cost control or court arrangements. Keep the tone professional and encouraging.

Session summary:
{summary}"""


def build_advice_summary(sessions: Sequence[Session], limit: int = RECENT_SESSION_COUNT) -> str:
    """Summarize the first ``limit`` sessions (pass them most recent first).

    Example:
        "Date: 2025-03-14, Court fee: 60, Participants: 6, Shuttles: 3; ..."
    """
    return "; ".join(
        f"Date: {s.date.isoformat()}, Court fee: {s.court_fee}, "
        f"Participants: {len(s.participants)}, Shuttles: {s.shuttle_qty}"
        for s in sessions[:limit]
    )


class SessionAdvisor:
    """Generates club advice from recent sessions using Claude."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        client: anthropic.Anthropic | None = None,
    ):
        """Initialize the advisor.

        Args:
            api_key: Anthropic API key. Without a key (and no client) every
                call returns the fallback message.
            model: Claude model to use
            client: Pre-built client, mainly for tests
        """
        if client is None and api_key:
            client = anthropic.Anthropic(api_key=api_key)
        self.client = client
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def advise(self, sessions: Sequence[Session]) -> str:
        """Return advice text for the given sessions, most recent first."""
        if not sessions:
            return NO_SESSIONS_MESSAGE
        if self.client is None:
            logger.info("advisor_disabled")
            return FALLBACK_MESSAGE

        summary = build_advice_summary(sessions)
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                temperature=0.7,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": ADVICE_PROMPT.format(summary=summary)}],
            )
        except anthropic.APIError as e:
            logger.warning("advisor_request_failed", error=str(e))
            return FALLBACK_MESSAGE

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            logger.warning("advisor_empty_reply", stop_reason=message.stop_reason)
            return EMPTY_REPLY_MESSAGE

        logger.debug("advisor_replied", sessions=min(len(sessions), RECENT_SESSION_COUNT))
        return text
