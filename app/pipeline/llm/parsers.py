"""
LLM response parsers
"""
import re
import logging

logger = logging.getLogger(__name__)

# ```sql, ```SQL or bare ``` fences, with an optional trailing newline
_CODE_FENCE = re.compile(r"```(?:sql)?[ \t]*\n?", re.I)


def parse_sql(response: str) -> str:
    """Extract SQL from LLM response (remove markdown code fences)"""
    content = _CODE_FENCE.sub("", (response or "").strip())
    content = content.strip()

    logger.debug(f"[parse_sql] Cleaned SQL: {repr(content[:200])}")

    return content
