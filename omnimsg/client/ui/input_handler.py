"""
Input Handler

Platform-uniform "try to read one completed line from the operator" for the
chat loop.

Three readers implement the LineReader interface:

* BufferedLineReader polls the input descriptor with select() and consumes
  whatever bytes are available, completing a line on '\\n'.
* KeystrokeLineReader polls single keystrokes (msvcrt on Windows, a cbreak
  terminal elsewhere) and echoes them itself.
* BlockingLineReader reads one whole line per call. The process blocks until
  Enter is pressed, so incoming messages are not shown while typing. This is
  the accepted fallback where neither capability exists.
"""

import logging
import os
import select
import sys
from typing import Optional, TextIO

from omnimsg.shared.constants import (
    ERASE_SEQUENCE,
    INPUT_AUTO,
    INPUT_BLOCKING,
    INPUT_BUFFERED,
    INPUT_KEYSTROKE,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_ENTER,
    KEY_INTERRUPT,
    KEY_NEWLINE,
    KEY_SPECIAL_PREFIX,
    MAX_LINE_LENGTH,
    STDIN_READ_CHUNK,
    WINDOWS_PLATFORM,
)
from omnimsg.shared.exceptions import (
    ConfigurationError,
    InputHandlingError,
    UnsupportedPlatformError,
)
from omnimsg.shared.models import LineResult
from omnimsg.shared.protocols import KeySource, LineReader

# Platform-specific imports
if sys.platform == WINDOWS_PLATFORM:
    import msvcrt
else:
    import termios
    import tty

logger = logging.getLogger(__name__)


class LineBuffer:
    """
    The open line of one input session.

    Bytes beyond the capacity are dropped silently.
    """

    def __init__(self, capacity: int = MAX_LINE_LENGTH) -> None:
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    @property
    def text(self) -> str:
        """Current partial line."""
        return self._data.decode("utf-8", errors="replace")

    def append(self, data: bytes) -> bool:
        """
        Append bytes, dropping whatever does not fit.

        Returns:
            True if all bytes were accepted.
        """
        room = self.capacity - len(self._data)
        if room <= 0:
            return False
        self._data += data[:room]
        return len(data) <= room

    def erase(self) -> bool:
        """Remove the last byte. Returns False if the buffer was empty."""
        if not self._data:
            return False
        del self._data[-1]
        return True

    def take(self) -> str:
        """Return the completed line and reset the buffer."""
        line = self.text
        self._data.clear()
        return line


def _is_readable(fd: int) -> bool:
    ready, _, _ = select.select([fd], [], [], 0)
    return bool(ready)


class BufferedLineReader(LineReader):
    """Line reader for descriptors that can be polled for readability."""

    def __init__(self, fd: Optional[int] = None,
                 capacity: int = MAX_LINE_LENGTH,
                 chunk_size: int = STDIN_READ_CHUNK) -> None:
        """
        Initialize the reader.

        Args:
            fd: Input descriptor. Defaults to stdin.
            capacity: Maximum line length in bytes.
            chunk_size: Bytes requested per read.
        """
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.chunk_size = chunk_size
        self.buffer = LineBuffer(capacity)
        self._pending = b""
        self._eof = False

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def fileno(self) -> Optional[int]:
        return self.fd

    def _consume_pending(self) -> Optional[str]:
        newline = self._pending.find(b"\n")
        if newline < 0:
            self.buffer.append(self._pending.replace(b"\r", b""))
            self._pending = b""
            return None
        self.buffer.append(self._pending[:newline].replace(b"\r", b""))
        self._pending = self._pending[newline + 1:]
        return self.buffer.take()

    def try_read_line(self) -> LineResult:
        while True:
            line = self._consume_pending()
            if line is not None:
                return LineResult.line(line)

            if self._eof:
                if self.buffer:
                    return LineResult.line(self.buffer.take())
                return LineResult.interrupted()

            try:
                if not _is_readable(self.fd):
                    return LineResult.no_line_yet()
                chunk = os.read(self.fd, self.chunk_size)
            except (BlockingIOError, InterruptedError):
                return LineResult.no_line_yet()
            except (OSError, ValueError) as e:
                return LineResult.io_error(f"stdin read failed: {e}")

            if not chunk:
                logger.info("End of input reached")
                self._eof = True
            self._pending += chunk


class MsvcrtKeySource(KeySource):
    """
    Keystroke source backed by the Windows console (msvcrt).

    Keys are read as console bytes; the wide-character API would report
    some accented letters with the same code as the extended-key prefix.
    """

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def kbhit(self) -> bool:
        return msvcrt.kbhit()

    def getch(self) -> str:
        return msvcrt.getch().decode("latin-1")


class TermiosKeySource(KeySource):
    """
    Keystroke source for POSIX terminals.

    open() switches the terminal to cbreak mode; close() restores the saved
    attributes. Escape sequences (arrow keys and the like) are swallowed and
    reported as an empty key.
    """

    def __init__(self, fd: Optional[int] = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._saved_attributes = None

    def open(self) -> None:
        if self._saved_attributes is not None:
            return
        try:
            self._saved_attributes = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error as e:
            raise InputHandlingError(f"Could not switch terminal to cbreak mode: {e}") from e

    def close(self) -> None:
        if self._saved_attributes is None:
            return
        attributes, self._saved_attributes = self._saved_attributes, None
        try:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, attributes)
        except termios.error as e:
            logger.warning(f"Could not restore terminal attributes: {e}")

    def kbhit(self) -> bool:
        return _is_readable(self.fd)

    def _read_byte(self) -> str:
        data = os.read(self.fd, 1)
        if not data:
            raise EOFError("end of input")
        return data.decode("latin-1")

    def getch(self) -> str:
        key = self._read_byte()
        if key != "\x1b":
            return key
        if not self.kbhit():
            return ""
        introducer = self._read_byte()
        if introducer in ("[", "O"):
            while self.kbhit():
                if "@" <= self._read_byte() <= "~":
                    break
        return ""


class KeystrokeLineReader(LineReader):
    """
    Line reader built on raw keystroke polling.

    Printable characters are echoed and buffered; backspace erases the last
    character and its echo; Ctrl-C interrupts; Enter completes the line.
    """

    def __init__(self, key_source: KeySource,
                 echo: Optional[TextIO] = None,
                 capacity: int = MAX_LINE_LENGTH) -> None:
        """
        Initialize the reader.

        Args:
            key_source: Source of pending keystrokes.
            echo: Stream that receives the echo. Defaults to stdout.
            capacity: Maximum line length in characters.
        """
        self.keys = key_source
        self.echo = echo or sys.stdout
        self.buffer = LineBuffer(capacity)

    def open(self) -> None:
        self.keys.open()

    def close(self) -> None:
        self.keys.close()

    def fileno(self) -> Optional[int]:
        return getattr(self.keys, "fd", None)

    def _echo(self, text: str) -> None:
        self.echo.write(text)
        self.echo.flush()

    def try_read_line(self) -> LineResult:
        try:
            while self.keys.kbhit():
                key = self.keys.getch()

                if key == KEY_INTERRUPT:
                    return LineResult.interrupted()

                if key in (KEY_ENTER, KEY_NEWLINE):
                    self._echo("\n")
                    return LineResult.line(self.buffer.take())

                if key in (KEY_BACKSPACE, KEY_DELETE):
                    if self.buffer.erase():
                        self._echo(ERASE_SEQUENCE)
                    continue

                if key in KEY_SPECIAL_PREFIX:
                    # Extended keys arrive as a prefix plus a scan code.
                    if self.keys.kbhit():
                        self.keys.getch()
                    continue

                if len(key) == 1 and " " <= key <= "~":
                    if self.buffer.append(key.encode("ascii")):
                        self._echo(key)
        except EOFError:
            return LineResult.interrupted()
        except OSError as e:
            return LineResult.io_error(f"console read failed: {e}")

        return LineResult.no_line_yet()


class BlockingLineReader(LineReader):
    """Fallback reader that blocks until a whole line is typed."""

    def __init__(self, stream: Optional[TextIO] = None,
                 capacity: int = MAX_LINE_LENGTH) -> None:
        self.stream = stream or sys.stdin
        self.capacity = capacity

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def fileno(self) -> Optional[int]:
        return None

    def try_read_line(self) -> LineResult:
        try:
            line = self.stream.readline()
        except OSError as e:
            return LineResult.io_error(f"stdin read failed: {e}")

        if not line:
            return LineResult.interrupted()

        text = line.replace("\r", "").replace("\n", "")
        return LineResult.line(text[:self.capacity])


def _stdin_fileno(stdin: TextIO) -> Optional[int]:
    try:
        return stdin.fileno()
    except (OSError, ValueError):
        return None


def create_line_reader(mode: str = INPUT_AUTO,
                       stdin: Optional[TextIO] = None,
                       stdout: Optional[TextIO] = None,
                       platform: str = sys.platform) -> LineReader:
    """
    Build the line reader for a configured input mode.

    "auto" picks keystroke polling on Windows, descriptor polling elsewhere,
    and the blocking fallback when stdin has no descriptor.

    Raises:
        ConfigurationError: If the mode name is unknown.
        UnsupportedPlatformError: If the mode cannot work on this platform.
        InputHandlingError: If stdin has no usable descriptor.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if mode == INPUT_AUTO:
        if platform == WINDOWS_PLATFORM:
            mode = INPUT_KEYSTROKE
        elif _stdin_fileno(stdin) is not None:
            mode = INPUT_BUFFERED
        else:
            mode = INPUT_BLOCKING
        logger.debug(f"Input mode auto-selected: {mode}")

    if mode == INPUT_BLOCKING:
        return BlockingLineReader(stdin)

    if mode == INPUT_KEYSTROKE:
        if platform == WINDOWS_PLATFORM:
            return KeystrokeLineReader(MsvcrtKeySource(), echo=stdout)
        fd = _stdin_fileno(stdin)
        if fd is None or not os.isatty(fd):
            raise UnsupportedPlatformError("Keystroke input requires stdin to be a terminal")
        return KeystrokeLineReader(TermiosKeySource(fd), echo=stdout)

    if mode == INPUT_BUFFERED:
        if platform == WINDOWS_PLATFORM:
            raise UnsupportedPlatformError("Console input cannot be polled with select() on Windows")
        fd = _stdin_fileno(stdin)
        if fd is None:
            raise InputHandlingError("stdin has no file descriptor to poll")
        return BufferedLineReader(fd)

    raise ConfigurationError(f"Unknown input mode: {mode}")
