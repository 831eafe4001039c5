import contextlib

from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from loyalty_receipts.term_ui import select_member

MEMBERS = ["A001", "A002", "B100"]


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


def test_typed_member_is_returned():
    with pipe_session() as (pipe, sess):
        pipe.send_text("B100\r")
        assert select_member(MEMBERS, session=sess) == "B100"


def test_enter_on_empty_buffer_returns_default():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_member(MEMBERS, default="A002", session=sess) == "A002"


def test_enter_without_default_returns_none():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_member(MEMBERS, session=sess) is None


def test_surrounding_whitespace_is_ignored():
    with pipe_session() as (pipe, sess):
        pipe.send_text("  A001 \r")
        assert select_member(MEMBERS, session=sess) == "A001"
