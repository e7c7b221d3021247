"""
Chat Client Package

Provides the cooperative chat loop and its entry point.
"""

from .chat_client import ChatClient

__all__ = ["ChatClient"]
