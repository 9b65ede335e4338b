import asyncio
import json
from typing import Dict, List

from core.models import GameStage, TableConfig
from host.server import ClientSession, HostServer
from sample_bot import handle_message


# Fake sockets so we can exercise async paths without opening real connections.
class DummyWebSocket:
    def __init__(self, incoming: List[str] = None) -> None:
        self.sent: list[str] = []
        self.incoming = list(incoming or [])
        self.closed = False

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def recv(self) -> str:
        return self.incoming.pop(0)

    async def close(self, *args, **kwargs) -> None:
        self.closed = True

    def messages(self, msg_type: str = None) -> List[Dict[str, object]]:
        decoded = [json.loads(raw) for raw in self.sent]
        if msg_type is None:
            return decoded
        return [message for message in decoded if message["type"] == msg_type]


def setup_server(players: int = 2, computer_player: bool = False, rounds: int = 1) -> tuple[HostServer, list[ClientSession], list[DummyWebSocket]]:
    server = HostServer(
        TableConfig(players=players, shuffles=1, computer_player=computer_player, move_time_ms=0, rounds=rounds)
    )
    sessions: list[ClientSession] = []
    sockets: list[DummyWebSocket] = []

    for idx in range(len(server.remote_seats())):
        seat = server._claim_seat(f"Team{idx}")
        assert seat is not None
        websocket = DummyWebSocket()
        session = ClientSession(seat=seat, team=f"Team{idx}", websocket=websocket)
        server.sessions[seat] = session
        sessions.append(session)
        sockets.append(websocket)

    return server, sessions, sockets


def test_round_starts_when_all_seats_filled_and_deals_privately():
    server, sessions, sockets = setup_server(players=3)
    asyncio.run(server._maybe_start_round())

    ctx = server.engine.round
    assert ctx is not None and ctx.stage == GameStage.DRAW
    for session, socket in zip(sessions, sockets):
        start = socket.messages("start_round")
        assert start and start[0]["round_id"] == ctx.round_id
        deals = socket.messages("deal")
        assert len(deals) == 1
        assert deals[0]["seat"] == session.seat
        assert deals[0]["cards"] == [card.label for card in ctx.hands[session.seat - 1].cards]
        request = socket.messages("draw_request")[0]
        assert request["deck_remaining"] == 52 - 15


def test_round_waits_for_missing_seat():
    server, sessions, _ = setup_server(players=3)
    server.sessions.pop(sessions[-1].seat)
    asyncio.run(server._maybe_start_round())
    assert server.engine.round is None


def test_claim_seat_reuses_team_and_reports_full_table():
    server = HostServer(TableConfig(players=2, move_time_ms=0))
    assert server._claim_seat("Alpha") == 1
    assert server._claim_seat("alpha") == 1
    assert server._claim_seat("Beta") == 2
    assert server._claim_seat("Gamma") is None


def test_draw_round_trip_ends_with_showdown_and_match_end():
    server, sessions, sockets = setup_server(players=2)
    asyncio.run(server._maybe_start_round())
    round_id = server.engine.round.round_id

    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": [1, 2]}))
    hand = sockets[0].messages("hand")[0]
    assert len(hand["discarded"]) == 2
    assert hand["cards"] == [card.label for card in server.engine.round.hands[0].cards]
    assert any(event["ev"] == "DRAW" and event["count"] == 2 for event in sockets[1].messages("event"))
    assert not sockets[1].messages("showdown")

    asyncio.run(server._handle_draw(sessions[1], {"type": "draw", "round_id": round_id, "slots": []}))
    for socket in sockets:
        showdown = socket.messages("showdown")
        assert len(showdown) == 1
        assert showdown[0]["winner"] in (1, 2)
        assert socket.messages("end_round")
        match_end = socket.messages("match_end")[0]
        assert sum(entry["wins"] for entry in match_end["wins"]) == 1
    assert server.engine.round.stage == GameStage.END


def test_next_round_starts_until_round_limit():
    server, sessions, sockets = setup_server(players=2, rounds=2)
    asyncio.run(server._maybe_start_round())
    for _ in range(2):
        round_id = server.engine.round.round_id
        for session in sessions:
            asyncio.run(server._handle_draw(session, {"type": "draw", "round_id": round_id, "slots": []}))
    assert server.rounds_played == 2
    assert len(sockets[0].messages("start_round")) == 2
    assert len(sockets[0].messages("match_end")) == 1


def test_draw_errors_are_reported():
    server, sessions, sockets = setup_server(players=2)
    asyncio.run(server._maybe_start_round())
    round_id = server.engine.round.round_id

    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": "R-old", "slots": []}))
    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": "1,2"}))
    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": [True]}))
    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": [3]}))
    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": [4]}))

    codes = [message["code"] for message in sockets[0].messages("error")]
    assert codes == ["ROUND_NOT_ACTIVE", "BAD_SCHEMA", "BAD_SCHEMA", "ALREADY_DRAWN"]


def test_deck_exhaustion_is_reported_and_player_may_retry():
    server, sessions, sockets = setup_server(players=7)
    asyncio.run(server._maybe_start_round())
    round_id = server.engine.round.round_id
    for session in sessions[:3]:
        asyncio.run(server._handle_draw(session, {"type": "draw", "round_id": round_id, "slots": [1, 2, 3, 4, 5]}))

    asyncio.run(server._handle_draw(sessions[3], {"type": "draw", "round_id": round_id, "slots": [1, 2, 3]}))
    assert sockets[3].messages("error")[0]["code"] == "DECK_EXHAUSTED"

    asyncio.run(server._handle_draw(sessions[3], {"type": "draw", "round_id": round_id, "slots": [1]}))
    assert sockets[3].messages("hand")
    assert 4 not in server.engine.pending_draws()


def test_timer_expiry_makes_pending_players_stand_pat():
    server, sessions, sockets = setup_server(players=3)
    asyncio.run(server._maybe_start_round())
    round_id = server.engine.round.round_id
    asyncio.run(server._handle_draw(sessions[0], {"type": "draw", "round_id": round_id, "slots": [5]}))

    asyncio.run(server._timer_expired(round_id))

    stand_pat = [event["seat"] for event in sockets[0].messages("event") if event["ev"] == "STAND_PAT"]
    assert stand_pat == [2, 3]
    assert sockets[0].messages("showdown")


def test_stale_timer_is_ignored():
    server, _, sockets = setup_server(players=2)
    asyncio.run(server._maybe_start_round())
    asyncio.run(server._timer_expired("R-stale"))
    assert server.engine.round.stage == GameStage.DRAW
    assert not sockets[0].messages("showdown")


def test_house_seat_draws_on_its_own():
    server, sessions, sockets = setup_server(players=3, computer_player=True)
    assert server.remote_seats() == [1, 2]
    asyncio.run(server._maybe_start_round())
    assert server.engine.pending_draws() == [1, 2]
    start = sockets[0].messages("start_round")[0]
    assert {"seat": 3, "team": "HOUSE"} in start["seats"]


def test_handle_connection_rejects_bad_hello():
    server = HostServer(TableConfig(players=2, move_time_ms=0))
    websocket = DummyWebSocket([json.dumps({"type": "draw"})])
    asyncio.run(server._handle_connection(websocket))
    assert websocket.messages("error")[0]["code"] == "BAD_HELLO"
    assert websocket.closed


def test_handle_connection_rejects_missing_team():
    server = HostServer(TableConfig(players=2, move_time_ms=0))
    websocket = DummyWebSocket([json.dumps({"type": "hello", "team": "  "})])
    asyncio.run(server._handle_connection(websocket))
    assert websocket.messages("error")[0]["code"] == "BAD_SCHEMA"


def test_sample_bot_answers_draw_request():
    server, sessions, sockets = setup_server(players=2)
    asyncio.run(server._maybe_start_round())

    state: Dict[str, object] = {}
    reply = None
    for message in sockets[0].messages():
        reply = handle_message(state, message) or reply
    assert reply is not None
    assert reply["type"] == "draw"
    assert reply["round_id"] == server.engine.round.round_id

    asyncio.run(server._handle_draw(sessions[0], reply))
    assert sockets[0].messages("hand")
