"""Evaluation session lifecycle."""
from core.sessions.manager import SessionManager

__all__ = ['SessionManager']
