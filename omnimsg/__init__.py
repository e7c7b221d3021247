"""
Omni Messenger

Minimal serverless LAN chat over UDP broadcast.
"""

__version__ = "1.0.0"
