"""Member repositories."""

from app.repositories.members.member import MemberRepository

__all__ = ["MemberRepository"]
