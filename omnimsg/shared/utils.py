"""
Utility Functions

Common utility functions used throughout the messenger.
"""

import os
import re
from typing import Optional, Tuple


def format_address(address: Tuple[str, int]) -> str:
    """
    Format an address tuple as a string.

    Args:
        address: Tuple of (host, port).

    Returns:
        Formatted address string.
    """
    return f"{address[0]}:{address[1]}"


def format_peer(address: Optional[Tuple[str, int]]) -> str:
    """
    Format the sender of a datagram for display.

    Only the host part is shown; the port is an ephemeral detail.
    """
    if not address:
        return "?"
    return str(address[0])


def program_name(argv0: Optional[str], default: str = "omnimsg") -> str:
    """
    Extract the program name from argv[0], which may be a full path.

    Handles '/', '\\' and drive separators like 'A:'.
    """
    if not argv0:
        return default
    base = re.split(r"[/\\:]", argv0)[-1]
    if base in ("__main__.py", "-c"):
        return default
    return os.path.splitext(base)[0] if base.endswith(".py") else (base or default)
