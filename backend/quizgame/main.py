from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .config import Settings, get_settings
from .db import InMemoryDatabase
from .errors import InsufficientQuestions, NotFoundError, QuizGameError, SessionNotFound
from .game import SessionEngine
from .logging_config import configure_logging
from .models import Player
from .players import PlayerRepository
from .questions import JsonQuestionPool
from .ranking import Leaderboard
from .schemas import GameSessionOut, PublicQuestionOut, StartGameOut, SubmitAnswerIn, SubmitAnswerOut
from .sessions import SessionStore

router = APIRouter(prefix="/api")


def build_engine(settings: Settings) -> SessionEngine:
    players = PlayerRepository(InMemoryDatabase().players)
    leaderboard = Leaderboard(players, points_per_level=settings.POINTS_PER_LEVEL)
    return SessionEngine(JsonQuestionPool(settings.QUESTIONS_FILE), SessionStore(), leaderboard)


def get_engine(request: Request) -> SessionEngine:
    return request.app.state.engine


def require_player(x_player_id: Optional[int] = Header(default=None)) -> int:
    if x_player_id is None:
        raise HTTPException(status_code=401, detail="User is not authenticated")
    return x_player_id


@router.get("/health")
async def health():
    return {"ok": True}


@router.post("/game/start", response_model=StartGameOut)
async def start_game(player_id: int = Depends(require_player), engine: SessionEngine = Depends(get_engine)):
    try:
        started = await engine.start(player_id)
    except InsufficientQuestions as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return StartGameOut(
        game_session_id=started.session_id,
        player_id=started.player_id,
        start_time=started.start_time,
        total_questions=started.total_questions,
        time_limit_seconds=started.time_limit_seconds,
        question_ids=started.question_ids,
    )


@router.get("/game/{session_id}", response_model=GameSessionOut)
async def get_game_session(session_id: int, engine: SessionEngine = Depends(get_engine)):
    try:
        s = engine.get(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return GameSessionOut.from_session(s)


@router.post("/game/submit-answer", response_model=SubmitAnswerOut)
async def submit_answer(
    payload: SubmitAnswerIn,
    _: int = Depends(require_player),
    engine: SessionEngine = Depends(get_engine),
):
    try:
        result = await engine.submit_answer(payload.game_session_id, payload.question_id, payload.answer_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except QuizGameError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SubmitAnswerOut(**result.model_dump())


@router.get("/players", response_model=List[Player])
async def leaderboard(limit: int = 100, engine: SessionEngine = Depends(get_engine)):
    return await engine.leaderboard.standings(limit)


@router.get("/questions", response_model=List[PublicQuestionOut])
async def list_questions(engine: SessionEngine = Depends(get_engine)):
    questions = await engine.pool.get_all()
    return [PublicQuestionOut(**q.model_dump(mode="json", exclude={"correct_answer_id"})) for q in questions]


def create_app(settings: Optional[Settings] = None, engine: Optional[SessionEngine] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.PLAYERS_FILE:
            await engine.leaderboard.players.load_file(settings.PLAYERS_FILE)
            await engine.leaderboard.recalculate()
        yield

    app = FastAPI(title="Quiz Game API", lifespan=lifespan)
    app.state.engine = engine

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    config = uvicorn.Config(app=app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
    uvicorn.Server(config).run()
