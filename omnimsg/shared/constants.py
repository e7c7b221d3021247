"""
Application Constants

Defines constants used throughout the LAN messenger.
"""

# Protocol constants
PROTOCOL_PREFIX = b"OM1|"
PROTOCOL_SEPARATOR = b"|"
DEFAULT_NICKNAME = "anon"

# Buffer and limit constants (buffer sizes include a terminator slot)
MAX_NICK = 32
MAX_TEXT = 512
MAX_PKT = 768
MAX_NICKNAME_BYTES = MAX_NICK - 1
MAX_BODY_BYTES = MAX_TEXT - 1
MAX_PACKET_BYTES = MAX_PKT - 1
MAX_LINE_LENGTH = MAX_TEXT - 1
STDIN_READ_CHUNK = 128

# Default network settings
DEFAULT_PORT = 24250
DEFAULT_BROADCAST_ADDRESS = "255.255.255.255"
DEFAULT_BIND_ADDRESS = ""

# Timing constants
DEFAULT_IDLE_INTERVAL_MS = 10

# Strategy names
RECEIVE_NONBLOCKING = "nonblocking"
RECEIVE_BUFFERED_LENGTH = "buffered-length"
RECEIVE_STRATEGIES = (RECEIVE_NONBLOCKING, RECEIVE_BUFFERED_LENGTH)

INPUT_AUTO = "auto"
INPUT_BUFFERED = "buffered"
INPUT_KEYSTROKE = "keystroke"
INPUT_BLOCKING = "blocking"
INPUT_MODES = (INPUT_AUTO, INPUT_BUFFERED, INPUT_KEYSTROKE, INPUT_BLOCKING)

WAIT_SLEEP = "sleep"
WAIT_SELECT = "select"
WAIT_STRATEGIES = (WAIT_SLEEP, WAIT_SELECT)

# Command constants
QUIT_COMMAND = "/quit"
HELP_COMMAND = "/help"
COMMANDS_HELP = "Commands: /quit, /help"

# UI constants
PROMPT = "> "
FAREWELL = "Bye."

# Platform constants
WINDOWS_PLATFORM = "win32"

# Keystroke codes for raw console input
KEY_INTERRUPT = "\x03"
KEY_ENTER = "\r"
KEY_NEWLINE = "\n"
KEY_BACKSPACE = "\x08"
KEY_DELETE = "\x7f"
KEY_SPECIAL_PREFIX = ("\x00", "\xe0")
ERASE_SEQUENCE = "\b \b"

# Log format constants
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
