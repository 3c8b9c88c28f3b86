import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from minefield.config import DIFFICULTIES, Settings
from minefield.engine import ConfigurationError
from minefield.game import GameSession

load_dotenv(dotenv_path=Path('.env.local'))

API_BASE = "/api/minefield"


class StartBody(BaseModel):
    board_width: Optional[int] = Field(None, ge=1, le=60)
    board_height: Optional[int] = Field(None, ge=1, le=60)
    difficulty: Optional[str] = None
    rng_seed: Optional[int] = None


class MoveBody(BaseModel):
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)


def create_app(session=None, settings=None) -> FastAPI:
    app = FastAPI(title="Minefield Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.state.session = session or GameSession()
    if settings is None:
        try:
            settings = Settings.from_env()
        except ConfigurationError as e:
            logging.getLogger("uvicorn.error").error(f"[minefield] invalid configuration error={e}")
            raise
    app.state.settings = settings

    @app.on_event("startup")
    async def _log_settings():
        s = app.state.settings
        logging.getLogger("uvicorn.error").info(
            f"[minefield] Settings width={s.width} height={s.height} difficulty={s.difficulty} seed={s.rng_seed if s.rng_seed is not None else '-'}"
        )

    def require_game():
        f = app.state.session.get_field()
        if f is None:
            raise HTTPException(status_code=404, detail="no game")
        return f

    def check_bounds(body: MoveBody) -> None:
        f = require_game()
        if body.x >= f.width or body.y >= f.height:
            raise HTTPException(status_code=400, detail="out_of_bounds")

    def move_response(outcome):
        return app.state.session.to_client() | {"outcome": outcome.value}

    @app.get(f"{API_BASE}/difficulties")
    def difficulties():
        return dict(DIFFICULTIES)

    @app.post(f"{API_BASE}/start")
    def start_game(body: Optional[StartBody] = None):
        body = body or StartBody()
        s = app.state.settings
        try:
            app.state.session.start_game(
                body.board_width or s.width,
                body.board_height or s.height,
                body.difficulty or s.difficulty,
                rng_seed=body.rng_seed if body.rng_seed is not None else s.rng_seed,
            )
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return app.state.session.to_client()

    @app.get(f"{API_BASE}/state")
    def get_state():
        require_game()
        return app.state.session.to_client()

    @app.post(f"{API_BASE}/reveal")
    def reveal(body: MoveBody):
        check_bounds(body)
        return move_response(app.state.session.reveal(body.x, body.y))

    @app.post(f"{API_BASE}/flag")
    def flag(body: MoveBody):
        check_bounds(body)
        return move_response(app.state.session.flag(body.x, body.y))

    @app.post(f"{API_BASE}/restart")
    def restart():
        require_game()
        try:
            app.state.session.restart()
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return app.state.session.to_client()

    @app.post(f"{API_BASE}/close")
    def close():
        require_game()
        app.state.session.close()
        return {"status": "closed"}

    # Static frontend
    frontend_dir = Path(__file__).resolve().parent.parent / "frontend"
    if frontend_dir.exists():
        app.mount("/", StaticFiles(directory=str(frontend_dir), html=True), name="frontend")

    return app


app = create_app()
