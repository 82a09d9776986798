"""Tests for the AI workflow analyst."""

import json
from unittest.mock import AsyncMock

import pytest

from flowboard.services.boards import BoardService
from flowboard.services.errors import AnalysisError, BoardNotFoundError
from flowboard.services.workflow_ai import analyze_workflow, parse_analysis

_REPLY = {
    "bottlenecks": [
        {
            "description": "Review queue is growing",
            "severity": "high",
            "suggestions": ["Add a second reviewer"],
        }
    ],
    "efficiency_score": 62,
    "general_suggestions": ["Limit WIP per person"],
}


class TestParseAnalysis:
    def test_extracts_json_from_surrounding_prose(self):
        content = f"Here is my analysis:\n```json\n{json.dumps(_REPLY)}\n```\nHope it helps."
        result = parse_analysis(content)
        assert result.efficiency_score == 62
        assert result.bottlenecks[0].severity == "high"
        assert result.general_suggestions == ["Limit WIP per person"]

    def test_accepts_camel_case_keys(self):
        result = parse_analysis(
            '{"bottlenecks": [], "efficiencyScore": 90, "generalSuggestions": ["Keep going"]}'
        )
        assert result.efficiency_score == 90
        assert result.general_suggestions == ["Keep going"]

    def test_no_json_raises(self):
        with pytest.raises(AnalysisError, match="no JSON object"):
            parse_analysis("I could not analyse this board.")

    def test_malformed_json_raises(self):
        with pytest.raises(AnalysisError):
            parse_analysis('{"efficiency_score": 5,}')

    def test_invalid_severity_raises(self):
        with pytest.raises(AnalysisError):
            parse_analysis('{"bottlenecks": [{"description": "x", "severity": "dire"}]}')


def _board_handler(op, variables):
    if op == "GetBoardById":
        return {
            "data": {
                "boards": [
                    {
                        "id": "100",
                        "name": "Sprint",
                        "groups": [{"id": "g1", "title": "Todo", "position": "1"}],
                        "columns": [
                            {"id": "status", "title": "Status", "type": "status", "settings_str": "{}"}
                        ],
                    }
                ]
            }
        }
    if op == "GetBoardItems":
        items = [{"id": "1", "name": "Task", "group": {"id": "g1", "title": "Todo"}}]
        return {"data": {"boards": [{"items": items if variables["page"] == 1 else []}]}}
    raise AssertionError(f"unexpected operation {op}")


class TestAnalyzeWorkflow:
    @pytest.mark.asyncio
    async def test_sends_board_data_to_llm(self, executor, fake_monday, mocker):
        fake_monday(_board_handler)
        completion = mocker.patch(
            "flowboard.services.workflow_ai.chat_completion",
            new_callable=AsyncMock,
            return_value=json.dumps(_REPLY),
        )

        result = await analyze_workflow("100", BoardService(executor))

        assert result.efficiency_score == 62
        completion.assert_awaited_once()
        prompt = completion.call_args.args[0]
        assert '"name": "Sprint"' in prompt
        assert '"Task"' in prompt
        assert "settings_str" not in prompt
        assert completion.call_args.kwargs["system"].startswith("You are an expert")

    @pytest.mark.asyncio
    async def test_missing_board_skips_llm(self, executor, fake_monday, mocker):
        fake_monday(lambda op, variables: {"data": {"boards": []}})
        completion = mocker.patch(
            "flowboard.services.workflow_ai.chat_completion", new_callable=AsyncMock
        )

        with pytest.raises(BoardNotFoundError):
            await analyze_workflow("404", BoardService(executor))
        completion.assert_not_called()

    @pytest.mark.asyncio
    async def test_unparseable_reply_raises(self, executor, fake_monday, mocker):
        fake_monday(_board_handler)
        mocker.patch(
            "flowboard.services.workflow_ai.chat_completion",
            new_callable=AsyncMock,
            return_value="Sorry, no analysis today.",
        )
        with pytest.raises(AnalysisError):
            await analyze_workflow("100", BoardService(executor))
