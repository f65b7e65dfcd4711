"""Tests for the verdict model and status mapping."""

import pytest

from phishguard.constants import Reason, Status
from phishguard.models import Verdict


@pytest.mark.parametrize(
    "score,expected",
    [(0, Status.SAFE), (39, Status.SAFE), (40, Status.SUSPICIOUS), (69, Status.SUSPICIOUS), (70, Status.MALICIOUS)],
)
def test_status_from_score(score, expected):
    assert Status.from_score(score) == expected


def test_to_dict_omits_unset_fields():
    verdict = Verdict(status=Status.SAFE, score=0, reason=Reason.TRUSTED_DOMAIN)
    assert verdict.to_dict() == {"status": "safe", "score": 0, "reason": "trusted_domain"}


def test_from_dict_restores_combined_verdict():
    verdict = Verdict(
        status=Status.SUSPICIOUS,
        score=56,
        reason=Reason.COMBINED_ANALYSIS,
        indicator_score=0,
        remote_score=80,
        remote_detections=4,
    )
    data = verdict.to_dict()
    assert data["indicator_score"] == 0
    assert Verdict.from_dict(data) == verdict


def test_should_block():
    assert Verdict(status=Status.MALICIOUS, score=100, reason=Reason.BLACKLISTED).should_block
    assert not Verdict(status=Status.SUSPICIOUS, score=69, reason=Reason.NO_API_KEY).should_block
    assert not Verdict(status=Status.ERROR, score=0, reason=Reason.INVALID_URL).should_block
