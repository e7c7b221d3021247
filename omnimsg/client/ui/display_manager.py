"""
Display Manager

Renders chat traffic, warnings and session banners on the console.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from omnimsg.shared.config import ClientConfig
from omnimsg.shared.constants import COMMANDS_HELP, FAREWELL, PROMPT
from omnimsg.shared.models import Message, PeerAddress
from omnimsg.shared.utils import format_peer


class DisplayManager:
    """
    Writes everything the operator sees.

    Network-supplied text is always wrapped in rich Text so it is never
    interpreted as console markup.
    """

    def __init__(self, console: Optional[Console] = None,
                 error_console: Optional[Console] = None) -> None:
        """
        Initialize the display manager.

        Args:
            console: Console for chat output. Defaults to stdout.
            error_console: Console for warnings. Defaults to stderr.
        """
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)

    def _print(self, renderable, end: str = "\n") -> None:
        self.console.print(renderable, end=end, soft_wrap=True, highlight=False)

    def show_prompt(self) -> None:
        self._print(Text(PROMPT), end="")

    def show_banner(self, config: ClientConfig) -> None:
        """Print the startup banner with the session settings."""
        details = Text()
        details.append("  nick      : ", style="dim").append(f"{config.nickname}\n")
        details.append("  port      : ", style="dim").append(f"{config.port}\n")
        details.append("  broadcast : ", style="dim").append(f"{config.broadcast_address}\n\n")
        details.append("Type a message and press Enter to broadcast.\n")
        details.append(COMMANDS_HELP, style="green")
        self.console.print(Panel(
            details,
            title="Omni Messenger (omnimsg) - LAN chat (UDP broadcast)",
            border_style="cyan",
            expand=False,
        ))
        self._print(Text(""))

    def show_message(self, peer: Optional[PeerAddress], message: Message) -> None:
        """Print a decoded chat message followed by a fresh prompt."""
        line = Text("\n")
        line.append(f"[{format_peer(peer)}] ", style="dim")
        line.append(message.nickname, style="bold cyan")
        line.append(": ")
        line.append(message.body)
        self._print(line)
        self.show_prompt()

    def show_raw(self, peer: Optional[PeerAddress], text: str) -> None:
        """Print a payload that could not be decoded, tagged with its sender."""
        line = Text("\n")
        line.append(f"[{format_peer(peer)}] ", style="dim")
        line.append(text, style="yellow")
        self._print(line)
        self.show_prompt()

    def show_help(self) -> None:
        self._print(Text(COMMANDS_HELP, style="green"))
        self.show_prompt()

    def show_warning(self, text: str) -> None:
        self.error_console.print(Text(f"\n{text}", style="bold red"), soft_wrap=True, highlight=False)

    def show_farewell(self) -> None:
        self._print(Text(f"\n{FAREWELL}"))
