"""
Tests for the session state machine.
"""

from fruit_slice.slice_core.events import EventDispatcher, SessionListener
from fruit_slice.slice_core.session import SessionState, SessionStatus


class StatusRecorder(SessionListener):
    def __init__(self):
        self.events = []

    def score_changed(self, score):
        self.events.append(("score", score))

    def lives_changed(self, lives):
        self.events.append(("lives", lives))

    def status_changed(self, status):
        self.events.append(("status", status))


def make_session(lives=3):
    recorder = StatusRecorder()
    session = SessionState(lives, EventDispatcher([recorder]))
    return session, recorder


class TestLives:
    """Test life loss and game over."""

    def test_third_loss_ends_session(self):
        session, _ = make_session()
        assert not session.lose_life("miss")
        assert not session.lose_life("miss")
        assert session.lose_life("bomb")
        assert session.status is SessionStatus.GAME_OVER
        assert session.lives == 0

    def test_no_loss_after_game_over(self):
        session, recorder = make_session(lives=1)
        session.lose_life()
        count = len(recorder.events)
        assert not session.lose_life()
        assert session.lives == 0
        assert len(recorder.events) == count

    def test_events_in_order(self):
        session, recorder = make_session(lives=1)
        session.lose_life()
        assert recorder.events == [("lives", 0), ("status", SessionStatus.GAME_OVER)]

    def test_lives_at_least_one(self):
        session, _ = make_session(lives=0)
        assert session.lives == 1


class TestScore:
    """Test score changes."""

    def test_award_while_playing(self):
        session, recorder = make_session()
        assert session.award(10)
        assert session.score == 10
        assert recorder.events == [("score", 10)]

    def test_no_award_when_not_playing(self):
        session, _ = make_session()
        session.pause()
        assert not session.award(10)
        assert session.score == 0

    def test_zero_points_ignored(self):
        session, recorder = make_session()
        assert not session.award(0)
        assert recorder.events == []


class TestPause:
    """Test pause transitions."""

    def test_toggle(self):
        session, recorder = make_session()
        assert session.toggle_pause()
        assert session.is_paused
        assert session.toggle_pause()
        assert session.is_playing
        assert recorder.events == [
            ("status", SessionStatus.PAUSED),
            ("status", SessionStatus.PLAYING),
        ]

    def test_no_life_loss_while_paused(self):
        session, _ = make_session()
        session.pause()
        assert not session.lose_life()
        assert session.lives == 3

    def test_cannot_pause_after_game_over(self):
        session, _ = make_session(lives=1)
        session.lose_life()
        assert not session.pause()
        assert not session.toggle_pause()
        assert session.is_over


class TestReset:
    """Test full reset."""

    def test_reset_restores_everything(self):
        session, recorder = make_session()
        session.award(50)
        session.lose_life()
        recorder.events.clear()

        session.reset()
        assert session.score == 0
        assert session.lives == 3
        assert session.is_playing
        assert recorder.events == [
            ("score", 0),
            ("lives", 3),
            ("status", SessionStatus.PLAYING),
        ]

    def test_reset_with_new_lives(self):
        session, _ = make_session()
        session.reset(starting_lives=5)
        assert session.lives == 5
