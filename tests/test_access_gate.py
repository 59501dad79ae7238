from quizcraft.core.access_gate import AccessGate, password_matches
from quizcraft.core.models import Quiz


def test_correct_code_grants_a_day():
    gate = AccessGate("letmein")
    expiry = gate.verify("letmein", now=1000.0)
    assert expiry == 1000.0 + 24 * 60 * 60
    assert AccessGate.is_authorized(expiry, now=1001.0)
    assert not AccessGate.is_authorized(expiry, now=expiry + 1)


def test_wrong_code_or_disabled_gate_grants_nothing():
    assert AccessGate("letmein").verify("nope") is None
    disabled = AccessGate(None)
    assert not disabled.enabled
    assert disabled.verify("") is None


def test_malformed_expiry_is_not_authorized():
    assert not AccessGate.is_authorized(None)
    assert not AccessGate.is_authorized("")
    assert not AccessGate.is_authorized("tomorrow")
    assert AccessGate.is_authorized("2000", now=1000.0)


def test_password_matches():
    open_quiz = Quiz(id="a", title="Open")
    locked = Quiz(id="b", title="Locked", password="pw")

    assert password_matches(open_quiz, None)
    assert password_matches(locked, "pw")
    assert not password_matches(locked, None)
    assert not password_matches(locked, "PW")
