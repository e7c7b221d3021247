"""
Fuzzing tests for keystroke line editing.
"""

import io
import string

from hypothesis import given, settings, strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from conftest import FakeKeySource
from omnimsg.client.ui.input_handler import KeystrokeLineReader, LineBuffer
from omnimsg.shared.models import LineStatus

CAPACITY = 16

printable = st.sampled_from(string.printable[:95])
keys = st.one_of(
    printable,
    st.sampled_from(["\x08", "\x7f", "\t", "\x1b", "\x00", "\xe0", "é"]),
)


class KeystrokeEditingStateMachine(RuleBasedStateMachine):
    """Compare the keystroke reader against a plain list model of the line."""

    def __init__(self):
        super().__init__()
        self.keys = FakeKeySource()
        self.echo = io.StringIO()
        self.reader = KeystrokeLineReader(self.keys, echo=self.echo, capacity=CAPACITY)
        self.model = []

    @rule(char=printable)
    def type_character(self, char):
        self.keys.feed([char])
        assert self.reader.try_read_line().status is LineStatus.NO_LINE_YET
        if len(self.model) < CAPACITY:
            self.model.append(char)

    @rule()
    def backspace(self):
        self.keys.feed(["\x08"])
        self.reader.try_read_line()
        if self.model:
            self.model.pop()

    @rule()
    def press_enter(self):
        self.keys.feed(["\r"])
        result = self.reader.try_read_line()
        assert result.status is LineStatus.LINE
        assert result.text == "".join(self.model)
        self.model = []

    @invariant()
    def buffer_matches_model(self):
        assert self.reader.buffer.text == "".join(self.model)
        assert len(self.reader.buffer) <= CAPACITY


TestKeystrokeEditingStateMachine = KeystrokeEditingStateMachine.TestCase


class TestKeystrokeFuzzing:
    """Robustness of the reader against arbitrary key sequences."""

    @given(sequence=st.lists(keys, max_size=60))
    @settings(max_examples=200)
    def test_arbitrary_keys_never_fail(self, sequence):
        source = FakeKeySource(sequence + ["\r"])
        reader = KeystrokeLineReader(source, echo=io.StringIO(), capacity=CAPACITY)

        result = reader.try_read_line()

        assert result.status in (LineStatus.LINE, LineStatus.NO_LINE_YET)
        if result.status is LineStatus.LINE:
            assert len(result.text) <= CAPACITY
            assert all(" " <= c <= "~" for c in result.text)

    @given(chunks=st.lists(st.binary(max_size=40), max_size=20))
    @settings(max_examples=200)
    def test_line_buffer_never_exceeds_capacity(self, chunks):
        buffer = LineBuffer(CAPACITY)
        expected = b""
        for chunk in chunks:
            buffer.append(chunk)
            expected = (expected + chunk)[:CAPACITY]
            assert len(buffer) == len(expected)
        assert buffer.take() == expected.decode("utf-8", errors="replace")
