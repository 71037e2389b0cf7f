"""REST and WebSocket service for Up and Down the River tables."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from river.cards import deserialize_card
from river.deck import InsufficientCards
from river.errors import GameError, GameNotFound
from river.rules_schema import load_rules
from river.service import GameService

from .hub import BroadcastHub

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateGameRequest(WireModel):
    display_name: str = Field(..., alias="displayName", min_length=1)
    creator_max_cards: int = Field(0, alias="creatorMaxCards")


class JoinGameRequest(WireModel):
    game_id: str = Field(..., alias="gameId", min_length=1)
    display_name: str = Field(..., alias="displayName", min_length=1)
    is_bot: bool = Field(False, alias="isBot")


class GameRequest(WireModel):
    game_id: str = Field(..., alias="gameId", min_length=1)


class BidRequest(GameRequest):
    player_id: str = Field(..., alias="playerId", min_length=1)
    bid: int


class CardPayload(WireModel):
    suit: str = "spades"
    rank: int = 0
    is_joker: bool = Field(False, alias="isJoker")
    joker_name: Optional[str] = Field(None, alias="jokerName")


class PlayRequest(GameRequest):
    player_id: str = Field(..., alias="playerId", min_length=1)
    card: CardPayload


def status_for(exc: GameError) -> int:
    if isinstance(exc, GameNotFound):
        return 404
    if isinstance(exc, InsufficientCards):
        return 500
    return 400


def cors_origins_from_env() -> List[str]:
    raw = os.environ.get("RIVER_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def build_service(hub: BroadcastHub) -> GameService:
    rules = load_rules(os.environ.get("RIVER_RULES_FILE"))
    return GameService(rules=rules, publisher=hub.publish)


def create_app(
    service: Optional[GameService] = None,
    hub: Optional[BroadcastHub] = None,
    cors_origins: Optional[List[str]] = None,
) -> FastAPI:
    hub = hub or BroadcastHub()
    service = service or build_service(hub)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("River service ready")
        yield
        service.shutdown()
        logger.info("River service stopped")

    app = FastAPI(title="Up and Down the River", lifespan=lifespan)
    app.state.service = service
    app.state.hub = hub
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else cors_origins_from_env(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError) -> JSONResponse:
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})

    @app.post("/games/create")
    def create_game(payload: CreateGameRequest, request: Request) -> Dict[str, object]:
        created = service.create_game(payload.display_name, payload.creator_max_cards)
        base = str(request.base_url).rstrip("/")
        return {
            "gameId": created["gameId"],
            "playerId": created["playerId"],
            "link": f"{base}/games/{created['gameId']}",
        }

    @app.post("/games/join")
    def join_game(payload: JoinGameRequest) -> Dict[str, object]:
        player = service.join_game(payload.game_id, payload.display_name, is_bot=payload.is_bot)
        return {"gameId": payload.game_id, "playerId": player["id"]}

    @app.post("/games/start")
    def start_game(payload: GameRequest) -> Dict[str, object]:
        round_ = service.start_game(payload.game_id)
        state = service.get_game_state(payload.game_id)
        return {
            "message": "Game started; bidding phase begins",
            "gameId": payload.game_id,
            "currentRound": round_,
            "biddingOrder": round_["bidOrder"],
            "players": state["players"],
            "roundSequence": state["roundSequence"],
        }

    @app.post("/games/bid")
    def submit_bid(payload: BidRequest) -> Dict[str, object]:
        result = service.submit_bid(payload.game_id, payload.player_id, payload.bid)
        return {"message": "Bid accepted", **result}

    @app.post("/games/play")
    def play_card(payload: PlayRequest) -> Dict[str, object]:
        try:
            card = deserialize_card(payload.card.model_dump(by_alias=True))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        result = service.play_card(payload.game_id, payload.player_id, card)
        return {"message": "Card played", **result}

    @app.get("/games/state")
    def game_state(game_id: str = Query(..., alias="gameId", min_length=1)) -> Dict[str, object]:
        return service.get_game_state(game_id)

    @app.post("/games/reset")
    def reset_game(payload: GameRequest) -> Dict[str, object]:
        return {"message": "Game reset", "game": service.reset_game(payload.game_id)}

    @app.websocket("/ws")
    async def push_state(websocket: WebSocket, game_id: Optional[str] = Query(None, alias="gameId")) -> None:
        await websocket.accept()
        subscription = hub.subscribe(game_id)

        async def forward() -> None:
            while True:
                snapshot = await subscription.queue.get()
                await websocket.send_json(snapshot)

        sender: Optional[asyncio.Task] = None
        try:
            if game_id:
                try:
                    initial = await run_in_threadpool(service.get_game_state, game_id)
                except GameNotFound:
                    hub.unsubscribe(subscription)
                    await websocket.close(code=4404)
                    return
                await websocket.send_json(initial)
            sender = asyncio.create_task(forward())
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        except WebSocketDisconnect:
            pass
        finally:
            hub.unsubscribe(subscription)
            if sender is not None:
                sender.cancel()
                try:
                    with suppress(asyncio.CancelledError):
                        await sender
                except Exception:
                    logger.warning("WebSocket sender for %s failed", game_id or "all games", exc_info=True)
            logger.debug("WebSocket client for %s disconnected", game_id or "all games")

    return app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve Up and Down the River games.")
    parser.add_argument("--host", default=os.environ.get("RIVER_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("RIVER_PORT", "8080")))
    parser.add_argument("--log-level", default=os.environ.get("RIVER_LOG_LEVEL", "INFO"))
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
