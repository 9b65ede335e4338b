from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection

from core.cards import EmptyDeckError, cards_to_labels
from core.game import GameEngine
from core.models import GameStage, TableConfig
from practice.bots import draw_strategy

LOGGER = logging.getLogger("draw_host")

HOUSE_TEAM = "HOUSE"

# HostServer glues the draw engine to WebSocket clients.
# Every network concern lives here; the GameEngine stays pure.


@dataclass
class ClientSession:
    seat: int
    team: str
    websocket: ServerConnection


@dataclass
class DrawTimer:
    round_id: str
    deadline: float
    timer_task: Optional[asyncio.Task] = None


class HostServer:
    def __init__(self, config: TableConfig) -> None:
        self.engine = GameEngine(config)
        self.table_id = "T-1"
        self.sessions: Dict[int, ClientSession] = {}
        self.teams: Dict[int, str] = {}
        self.draw_timer: Optional[DrawTimer] = None
        self.lock = asyncio.Lock()
        self.rounds_played = 0
        self.wins: Dict[int, int] = {}
        if config.computer_player:
            self.teams[self.house_seat] = HOUSE_TEAM

    @property
    def house_seat(self) -> int:
        return self.engine.config.players

    def remote_seats(self) -> List[int]:
        count = self.engine.config.players
        if self.engine.config.computer_player:
            count -= 1
        return list(range(1, count + 1))

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("Draw host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        # First message must be "hello" so we know who we are talking to.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        team_raw = hello.get("team")
        team = team_raw.strip() if isinstance(team_raw, str) else ""
        if not team:
            await self._send_error(websocket, code="BAD_SCHEMA", msg="team required")
            await websocket.close()
            return

        async with self.lock:
            seat = self._claim_seat(team)
            previous = self.sessions.get(seat) if seat is not None else None
        if seat is None:
            await self._send_error(websocket, code="TABLE_FULL", msg="No seats available")
            await websocket.close()
            return
        if previous:
            await previous.websocket.close(code=4000, reason="Replaced by new connection")

        session = ClientSession(seat=seat, team=team, websocket=websocket)
        self.sessions[seat] = session
        LOGGER.info("Seat %s claimed by %s", seat, team)
        await self._send_json(websocket, "welcome", {
            "table_id": self.table_id,
            "seat": seat,
            "config": self._config_payload(),
        })
        await self._resend_round_state(session)
        await self._maybe_start_round()

        try:
            async for raw in websocket:
                message = self._decode(raw)
                if message.get("type") == "draw":
                    await self._handle_draw(session, message)
                else:
                    await self._send_error(websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
        except websockets.ConnectionClosed:
            pass
        finally:
            if self.sessions.get(seat) is session:
                self.sessions.pop(seat, None)
        LOGGER.info("Seat %s (%s) disconnected", seat, team)

    def _claim_seat(self, team: str) -> Optional[int]:
        team_key = team.casefold()
        for seat, existing in self.teams.items():
            if existing.casefold() == team_key and seat in self.remote_seats():
                self.teams[seat] = team
                return seat
        for seat in self.remote_seats():
            if seat not in self.teams:
                self.teams[seat] = team
                return seat
        return None

    # Round flow ------------------------------------------------------

    async def _maybe_start_round(self) -> None:
        async with self.lock:
            ctx = self.engine.round
            if ctx is not None and ctx.stage != GameStage.END:
                return
            if self.rounds_played >= self.engine.config.rounds:
                return
            if any(seat not in self.sessions for seat in self.remote_seats()):
                return
            self.engine.reset()
            ctx = self.engine.start_round()
            start_payload = self.engine.start_round_payload()
            start_payload["seats"] = [{"seat": seat, "team": team} for seat, team in sorted(self.teams.items())]
            house_events = self._house_draw_locked()
            deals = {seat: self.engine.hand_payload(seat) for seat in self.remote_seats()}
            draw_request = {
                "round_id": ctx.round_id,
                "deck_remaining": self.engine.deck_remaining(),
                "time_ms": self.engine.config.move_time_ms,
            }
        LOGGER.info("Round %s started for %s players", ctx.round_id, len(ctx.hands))

        await self._broadcast("start_round", start_payload)
        for seat, payload in deals.items():
            session = self.sessions.get(seat)
            if session:
                await self._send_json(session.websocket, "deal", payload)
                await self._send_json(session.websocket, "draw_request", draw_request)
        await self._broadcast_events(house_events)
        self._schedule_timer(ctx.round_id)

    def _house_draw_locked(self) -> List[Dict[str, object]]:
        if not self.engine.config.computer_player:
            return []
        hand = self.engine.hand_for(self.house_seat)
        discarded = self.engine.draw(self.house_seat, draw_strategy(hand.cards))
        return [{"ev": "DRAW", "seat": self.house_seat, "count": len(discarded)}]

    async def _handle_draw(self, session: ClientSession, message: Dict[str, object]) -> None:
        round_id = message.get("round_id")
        slots = message.get("slots", [])

        async with self.lock:
            ctx = self.engine.round
            if ctx is None or ctx.stage != GameStage.DRAW or round_id != ctx.round_id:
                await self._send_error(session.websocket, code="ROUND_NOT_ACTIVE", msg="Round no longer drawing")
                return
            if not isinstance(slots, list) or not all(
                isinstance(slot, int) and not isinstance(slot, bool) for slot in slots
            ):
                await self._send_error(session.websocket, code="BAD_SCHEMA", msg="slots must be a list of integers")
                return
            if session.seat not in self.engine.pending_draws():
                await self._send_error(session.websocket, code="ALREADY_DRAWN", msg="Draw already taken")
                return

            try:
                discarded = self.engine.draw(session.seat, slots)
            except EmptyDeckError as exc:
                LOGGER.warning("Rejected draw seat=%s slots=%s reason=%s", session.seat, slots, exc)
                await self._send_error(session.websocket, code="DECK_EXHAUSTED", msg=str(exc))
                return
            hand_payload = self.engine.hand_payload(session.seat)
            hand_payload["discarded"] = cards_to_labels(discarded)
            complete = self.engine.is_draw_complete()

        LOGGER.debug("Applied draw round=%s seat=%s count=%s", round_id, session.seat, len(discarded))
        await self._send_json(session.websocket, "hand", hand_payload)
        await self._broadcast_events([{"ev": "DRAW", "seat": session.seat, "count": len(discarded)}])
        if complete:
            await self._finish_round()

    async def _timer_expired(self, round_id: str) -> None:
        async with self.lock:
            ctx = self.engine.round
            if ctx is None or ctx.round_id != round_id or ctx.stage != GameStage.DRAW:
                return
            standing = self.engine.finish_draw()
        LOGGER.info("Draw timer expired for round %s; seats %s stand pat", round_id, standing)
        await self._broadcast_events([{"ev": "STAND_PAT", "seat": seat} for seat in standing])
        await self._finish_round()

    async def _finish_round(self) -> None:
        self._cancel_timer()
        async with self.lock:
            if not self.engine.is_draw_complete():
                return
            self.engine.score()
            showdown = self.engine.showdown_payload()
            winner = showdown["winner"]
            self.wins[winner] = self.wins.get(winner, 0) + 1
            self.rounds_played += 1
            match_over = self.rounds_played >= self.engine.config.rounds
            match_payload = self._match_result_locked()

        LOGGER.info("Round %s won by seat %s", showdown["round_id"], winner)
        await self._broadcast("showdown", showdown)
        await self._broadcast("end_round", {"round_id": showdown["round_id"], "rounds_played": self.rounds_played})
        if match_over:
            await self._broadcast("match_end", match_payload)
            LOGGER.info("Match over after %s round(s)", self.rounds_played)
            return
        await self._maybe_start_round()

    def _match_result_locked(self) -> Dict[str, object]:
        return {
            "rounds": self.rounds_played,
            "wins": [
                {"seat": seat, "team": team, "wins": self.wins.get(seat, 0)}
                for seat, team in sorted(self.teams.items())
            ],
        }

    async def _resend_round_state(self, session: ClientSession) -> None:
        # A reconnecting player gets its current cards back.
        async with self.lock:
            ctx = self.engine.round
            if ctx is None or ctx.stage != GameStage.DRAW:
                return
            payload = self.engine.hand_payload(session.seat)
            pending = session.seat in self.engine.pending_draws()
        await self._send_json(session.websocket, "deal", payload)
        if pending:
            await self._send_json(session.websocket, "draw_request", {
                "round_id": ctx.round_id,
                "deck_remaining": ctx.deck.remaining,
                "time_ms": self._time_remaining_ms(),
            })

    # Timer -----------------------------------------------------------

    def _schedule_timer(self, round_id: str) -> None:
        move_time_ms = self.engine.config.move_time_ms
        if move_time_ms <= 0:
            self.draw_timer = None
            return
        delay = move_time_ms / 1000
        timer = DrawTimer(round_id=round_id, deadline=time.monotonic() + delay)
        timer.timer_task = asyncio.create_task(self._run_timer(round_id, delay))
        self.draw_timer = timer

    async def _run_timer(self, round_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        await self._timer_expired(round_id)

    def _cancel_timer(self) -> None:
        timer = self.draw_timer
        self.draw_timer = None
        if timer and timer.timer_task and timer.timer_task is not asyncio.current_task():
            timer.timer_task.cancel()

    def _time_remaining_ms(self) -> int:
        if self.draw_timer is None:
            return self.engine.config.move_time_ms
        return max(int((self.draw_timer.deadline - time.monotonic()) * 1000), 0)

    # Messaging -------------------------------------------------------

    def _config_payload(self) -> Dict[str, object]:
        config = self.engine.config
        return {
            "players": config.players,
            "computer_player": config.computer_player,
            "move_time_ms": config.move_time_ms,
            "rounds": config.rounds,
        }

    async def _broadcast(self, msg_type: str, payload: Dict[str, object]) -> None:
        targets = [session.websocket for session in self.sessions.values()]
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _broadcast_events(self, events: List[Dict[str, object]]) -> None:
        for event in events:
            await self._broadcast("event", event)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        await websocket.send(self._envelope(msg_type, payload))

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
