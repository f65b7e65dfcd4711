"""Classification pipeline for PhishGuard."""

from .classifier import Classifier, fuse_scores

__all__ = ["Classifier", "fuse_scores"]
