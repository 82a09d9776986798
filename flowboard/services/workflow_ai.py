"""AI workflow analysis — asks the LLM to review a board's workflow.

Opaque collaborator of the metrics engine: given a board id it returns an
``AnalysisResult`` or raises.
"""

import json
import logging
import re

from pydantic import ValidationError

from flowboard.models.metrics import AnalysisResult
from flowboard.services.boards import BoardService
from flowboard.services.errors import AnalysisError, BoardNotFoundError
from flowboard.services.llm import chat_completion

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are an expert workflow analyst and project management consultant. "
    "Analyze the monday.com board data provided and identify process "
    "bottlenecks, inefficiencies, and provide actionable recommendations."
)

_PROMPT_TEMPLATE = """Please analyze this workflow data from a monday.com board and identify:
1. Potential bottlenecks and their severity (low, medium, high)
2. Efficiency improvement suggestions
3. Overall efficiency score from 0-100

Board Data:
{board_json}

Return your analysis in the following JSON format:
{{
  "bottlenecks": [
    {{
      "description": "Description of the bottleneck",
      "severity": "low|medium|high",
      "suggestions": ["Suggestion 1", "Suggestion 2"]
    }}
  ],
  "efficiency_score": 75,
  "general_suggestions": ["Suggestion 1", "Suggestion 2"]
}}"""

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def parse_analysis(content: str) -> AnalysisResult:
    """Pull the JSON object out of an LLM reply and validate it."""
    match = _JSON_BLOCK.search(content)
    if not match:
        raise AnalysisError("Failed to parse analysis result: no JSON object found")
    try:
        return AnalysisResult.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise AnalysisError(f"Failed to parse analysis result: {e}") from e


async def analyze_workflow(board_id: str, boards: BoardService) -> AnalysisResult:
    """Fetch the board and its items and have the LLM analyse them."""
    details = await boards.get_by_id(board_id)
    if details is None:
        raise BoardNotFoundError(board_id)
    items = await boards.get_items(board_id)

    payload = {
        "board": details.board.model_dump(),
        "groups": [g.model_dump() for g in details.groups],
        "columns": [c.model_dump(exclude={"settings_str"}) for c in details.columns],
        "items": [i.model_dump(exclude_none=True) for i in items],
    }
    prompt = _PROMPT_TEMPLATE.format(board_json=json.dumps(payload, indent=2))

    content = await chat_completion(prompt, system=_SYSTEM_PROMPT)
    result = parse_analysis(content)
    logger.info(
        "AI analysis for board %s: score=%s, %d bottleneck(s)",
        board_id,
        result.efficiency_score,
        len(result.bottlenecks),
    )
    return result
