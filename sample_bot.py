#!/usr/bin/env python3
"""
Starter client for the five-card draw host.

Usage:
    python sample_bot.py --team TEAM_NAME --url ws://127.0.0.1:8765/

This script shows the core loop:
  * handshake with the host
  * keep the cards from `deal` / `hand` messages
  * answer each `draw_request` with the slots to replace
  * log the showdown and stop on `match_end`

Replace the `choose_draw` function with your own strategy.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import websockets

from core.cards import parse_cards
from practice.bots import draw_strategy

LOGGER = logging.getLogger("sample_bot")
STREAM_HANDLER = logging.StreamHandler()
STREAM_HANDLER.setFormatter(logging.Formatter("%(message)s"))
if not LOGGER.handlers:
    LOGGER.addHandler(STREAM_HANDLER)
LOGGER.propagate = False

SUIT_SYMBOLS = {"c": "♣", "d": "♦", "h": "♥", "s": "♠"}


def choose_draw(cards: List[str]) -> List[int]:
    """Return the 1-based card numbers to throw away (empty list stands pat)."""
    return draw_strategy(parse_cards(cards))


def handle_message(state: Dict[str, Any], message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Update ``state`` from one server message; returns a reply to send, if any."""
    msg_type = message.get("type")
    if msg_type == "welcome":
        state["seat"] = message.get("seat")
        LOGGER.info("[welcome] seat %s", state["seat"])
    elif msg_type in ("deal", "hand"):
        state["cards"] = list(message.get("cards", []))
        LOGGER.info("[%s] %s", msg_type, render_cards(state["cards"]))
    elif msg_type == "draw_request":
        slots = choose_draw(state.get("cards", []))
        LOGGER.info("[draw] replacing %s", slots or "nothing")
        return {"type": "draw", "round_id": message.get("round_id"), "slots": slots}
    elif msg_type == "showdown":
        for entry in message.get("hands", []):
            LOGGER.info("[showdown] seat %s %s %s", entry["seat"], render_cards(entry["cards"]), entry["rank"])
        LOGGER.info("[showdown] winner seat %s", message.get("winner"))
    elif msg_type == "match_end":
        state["done"] = True
        LOGGER.info("[match_end] %s", message.get("wins"))
    elif msg_type == "error":
        LOGGER.warning("[error] %s: %s", message.get("code"), message.get("msg"))
    else:
        LOGGER.debug("Ignoring message type=%s", msg_type)
    return None


async def run_bot(team: str, url: str) -> None:
    async with websockets.connect(url) as ws:
        await ws.send(json.dumps({"type": "hello", "v": 1, "team": team}))
        LOGGER.info("[connect] %s as %s", url, team)
        state: Dict[str, Any] = {}
        async for raw in ws:
            reply = handle_message(state, json.loads(raw))
            if reply is not None:
                await ws.send(json.dumps(reply))
            if state.get("done"):
                break


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sample five-card draw client")
    parser.add_argument("--team", required=True, help="Team name shown at the table")
    parser.add_argument("--url", default="ws://127.0.0.1:8765/", help="WebSocket URL")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    LOGGER.setLevel(getattr(logging, args.log_level.upper(), logging.INFO))
    asyncio.run(run_bot(args.team, args.url))


def render_cards(cards: List[str]) -> str:
    if not cards:
        return "--"
    return " ".join(card[0] + SUIT_SYMBOLS.get(card[1], card[1]) for card in cards)


if __name__ == "__main__":
    main()
