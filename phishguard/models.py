"""Verdict model returned by the classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import MALICIOUS_THRESHOLD, Reason, Status


@dataclass(frozen=True)
class Verdict:
    """Final classification of one URL. Never mutated after it is returned."""

    status: Status
    score: int
    reason: Reason
    indicator_score: Optional[int] = None
    remote_score: Optional[int] = None
    remote_detections: Optional[int] = None
    error: Optional[str] = None

    @property
    def should_block(self) -> bool:
        """Whether a navigation to this URL should be interrupted."""
        return self.status == Status.MALICIOUS or self.score >= MALICIOUS_THRESHOLD

    def to_dict(self) -> dict:
        data = {
            "status": self.status.value,
            "score": self.score,
            "reason": self.reason.value,
        }
        if self.indicator_score is not None:
            data["indicator_score"] = self.indicator_score
        if self.remote_score is not None:
            data["remote_score"] = self.remote_score
        if self.remote_detections is not None:
            data["remote_detections"] = self.remote_detections
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Verdict":
        return cls(
            status=Status(data["status"]),
            score=int(data["score"]),
            reason=Reason(data["reason"]),
            indicator_score=data.get("indicator_score"),
            remote_score=data.get("remote_score"),
            remote_detections=data.get("remote_detections"),
            error=data.get("error"),
        )
