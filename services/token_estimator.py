"""
Token Estimator

Cheap approximation of prompt size: a "token" is any run of characters
between whitespace and the punctuation marks . , ! ? ; :
Good enough for ranking and truncation decisions, not a model tokenizer.
"""

import re
from typing import Optional

TOKEN_SEPARATORS = re.compile(r"[\s.,!?;:]+")
TOKEN_PATTERN = re.compile(r"[^\s.,!?;:]+")

ELLIPSIS = "..."


def estimate_tokens(text: Optional[str]) -> int:
    """
    Estimate token count for text.

    Args:
        text: Text to count (None and "" count as 0)

    Returns:
        Number of non-empty fragments
    """
    if not text:
        return 0
    return sum(1 for fragment in TOKEN_SEPARATORS.split(text) if fragment)


def truncate_to_tokens(content: str, max_tokens: int) -> str:
    """
    Cut content to roughly max_tokens and mark the cut with an ellipsis.

    The cut length comes from the content's average characters per token.
    If the averaged cut still overshoots (dense tail), it is pulled back to
    the end of the max_tokens-th fragment so the result never exceeds the
    budget.

    Args:
        content: Text to cut
        max_tokens: Token budget for the result

    Returns:
        Truncated content ending in "..."
    """
    max_tokens = max(0, max_tokens)
    content = content or ""

    token_count = estimate_tokens(content)
    chars_per_token = len(content) / max(token_count, 1)
    max_chars = int(max_tokens * chars_per_token)

    trimmed = content[:max_chars]

    if estimate_tokens(trimmed) > max_tokens:
        if max_tokens == 0:
            trimmed = ""
        else:
            fragments = list(TOKEN_PATTERN.finditer(trimmed))
            trimmed = trimmed[:fragments[max_tokens - 1].end()]

    return trimmed + ELLIPSIS
