from app.domain.common.end_game import evaluate_winner
from app.domain.common.fsm import can_transition_round, can_transition_to
from app.store.models import PlayerStore


def _p(pid, role, alive=True):
    return PlayerStore(id=pid, room_id="r", name=pid, session_id=f"s-{pid}", role=role, is_alive=alive, joined_at=0)


def test_no_undercover_alive_means_civilians_win():
    players = [_p("a", "civilian"), _p("b", "civilian"), _p("u", "undercover", alive=False)]
    assert evaluate_winner(players) == "civilian"


def test_parity_means_undercover_wins():
    players = [_p("a", "civilian"), _p("b", "civilian", alive=False), _p("u", "undercover")]
    assert evaluate_winner(players) == "undercover"


def test_undercover_majority_wins():
    players = [_p("a", "civilian"), _p("u1", "undercover"), _p("u2", "undercover")]
    assert evaluate_winner(players) == "undercover"


def test_game_continues_while_civilians_lead():
    players = [_p("a", "civilian"), _p("b", "civilian"), _p("c", "civilian", alive=False), _p("u", "undercover")]
    assert evaluate_winner(players) is None


def test_room_transitions():
    assert can_transition_to("lobby", "playing") is True
    assert can_transition_to("playing", "finished") is True
    assert can_transition_to("lobby", "finished") is False
    assert can_transition_to("finished", "lobby") is False
    assert can_transition_to("playing", "lobby") is False


def test_round_transitions():
    assert can_transition_round("describing", "voting") is True
    assert can_transition_round("voting", "completed") is True
    assert can_transition_round("describing", "completed") is True
    assert can_transition_round("voting", "describing") is False
    assert can_transition_round("completed", "voting") is False
