"""Voting repositories."""

from app.repositories.voting.decision import DecisionRepository

__all__ = ["DecisionRepository"]
