"""
Code judging is delegated to an external service. The engine only needs a
pass/fail verdict per test case; the backend is chosen by the
``CODE_JUDGE_BACKEND`` setting.
"""
import logging

import requests
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class BaseJudge:
    def run(self, question, code, language, test_cases):
        """Return one boolean per test case, in order."""
        raise NotImplementedError


class HttpJudge(BaseJudge):
    """
    POSTs the submission to ``CODE_JUDGE_URL`` and expects
    ``{"results": [{"passed": true}, ...]}`` back, one entry per test case.
    Transport failures count every case as failed.
    """

    def __init__(self, url=None, timeout=None):
        self.url = url if url is not None else getattr(settings, 'CODE_JUDGE_URL', '')
        self.timeout = timeout or getattr(settings, 'CODE_JUDGE_TIMEOUT', 20)

    def run(self, question, code, language, test_cases):
        failed = [False] * len(test_cases)
        if not self.url:
            logger.warning("CODE_JUDGE_URL not configured; question %s scored as failed.", question.pk)
            return failed

        payload = {
            "language": language,
            "code": code,
            "timeLimit": question.time_limit,
            "testCases": [{"input": case.input, "expectedOutput": case.expected_output} for case in test_cases],
        }
        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            results = resp.json()['results']
        except requests.exceptions.Timeout:
            logger.error("Judge timed out on question %s", question.pk)
            return failed
        except requests.exceptions.RequestException as e:
            logger.error(f"Judge request failed on question {question.pk}: {e}")
            return failed
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Judge returned an unreadable response for question {question.pk}: {e}")
            return failed

        verdicts = [bool(item.get('passed')) if isinstance(item, dict) else bool(item) for item in results]
        # Missing verdicts count as failures
        return (verdicts + failed)[:len(test_cases)]


class CachingJudge(BaseJudge):
    """Remembers verdicts per (question, code, language) so a submission is judged once."""

    def __init__(self, judge):
        self.judge = judge
        self.verdicts = {}

    def run(self, question, code, language, test_cases):
        key = (question.pk, code, language, len(test_cases))
        if key not in self.verdicts:
            self.verdicts[key] = self.judge.run(question, code, language, test_cases)
        return self.verdicts[key]


def get_judge():
    return import_string(settings.CODE_JUDGE_BACKEND)()
