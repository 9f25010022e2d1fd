from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from assessments.judge import HttpJudge, get_judge

from .judges import PassAllJudge

QUESTION = SimpleNamespace(pk=7, time_limit=300)
CASES = [SimpleNamespace(input=f"{i} {i}", expected_output=str(2 * i), is_hidden=i > 1) for i in range(3)]


def judge_response(results):
    resp = MagicMock()
    resp.json.return_value = {"results": results}
    resp.raise_for_status.return_value = None
    return resp


@patch('assessments.judge.requests.post')
def test_posts_every_case_and_reads_verdicts(mock_post):
    mock_post.return_value = judge_response([{"passed": True}, {"passed": False}, {"passed": True}])

    verdicts = HttpJudge(url="http://judge.local/run", timeout=5).run(QUESTION, "print(1)", "python", CASES)

    assert verdicts == [True, False, True]
    payload = mock_post.call_args.kwargs['json']
    assert payload['language'] == "python"
    assert payload['timeLimit'] == 300
    assert payload['testCases'][2] == {"input": "2 2", "expectedOutput": "4"}
    assert mock_post.call_args.kwargs['timeout'] == 5


@patch('assessments.judge.requests.post')
def test_missing_verdicts_count_as_failures(mock_post):
    mock_post.return_value = judge_response([{"passed": True}])
    assert HttpJudge(url="http://judge.local/run").run(QUESTION, "x", "javascript", CASES) == [True, False, False]


@patch('assessments.judge.requests.post')
def test_timeout_fails_every_case(mock_post, caplog):
    mock_post.side_effect = requests.exceptions.Timeout()
    assert HttpJudge(url="http://judge.local/run").run(QUESTION, "x", "javascript", CASES) == [False] * 3
    assert "timed out" in caplog.text


@patch('assessments.judge.requests.post')
def test_http_error_fails_every_case(mock_post):
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.exceptions.HTTPError("502")
    mock_post.return_value = resp
    assert HttpJudge(url="http://judge.local/run").run(QUESTION, "x", "javascript", CASES) == [False] * 3


@patch('assessments.judge.requests.post')
def test_unreadable_body_fails_every_case(mock_post):
    resp = MagicMock()
    resp.json.side_effect = ValueError("not json")
    mock_post.return_value = resp
    assert HttpJudge(url="http://judge.local/run").run(QUESTION, "x", "javascript", CASES) == [False] * 3


@patch('assessments.judge.requests.post')
def test_unconfigured_judge_never_calls_out(mock_post, settings):
    settings.CODE_JUDGE_URL = ''
    assert HttpJudge().run(QUESTION, "x", "javascript", CASES) == [False] * 3
    mock_post.assert_not_called()


def test_backend_comes_from_settings(settings):
    settings.CODE_JUDGE_BACKEND = 'assessments.tests.judges.PassAllJudge'
    assert isinstance(get_judge(), PassAllJudge)
