# src/infrastructure/repositories/game_repository.py

from dataclasses import dataclass

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, select

from src.domain.enums import GameCategory
from src.infrastructure.db.models import Game, GameSession


@dataclass(frozen=True)
class GameFilter:
    category: GameCategory | None = None
    player_count: int | None = None
    min_player_count: int | None = None
    max_player_count: int | None = None
    available_only: bool = False


class GameRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, game_id: str) -> Game | None:
        stmt = select(Game).where(Game.id == game_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_title(self, title: str, exclude_id: str | None = None) -> Game | None:
        stmt = select(Game).where(func.lower(Game.title) == title.lower())
        if exclude_id:
            stmt = stmt.where(Game.id != exclude_id)
        return self.db.execute(stmt).scalars().first()

    def list_games(self, filters: GameFilter, page: int, page_size: int) -> list[Game]:
        stmt = select(Game)
        if filters.category:
            stmt = stmt.where(Game.category == filters.category)
        if filters.player_count is not None:
            # An exact head count supersedes the range bounds.
            stmt = stmt.where(Game.min_players <= filters.player_count)
            stmt = stmt.where(Game.max_players >= filters.player_count)
        else:
            if filters.min_player_count is not None:
                stmt = stmt.where(Game.max_players >= filters.min_player_count)
            if filters.max_player_count is not None:
                stmt = stmt.where(Game.min_players <= filters.max_player_count)
        if filters.available_only:
            stmt = stmt.where(Game.copies_owned > Game.copies_in_use)

        stmt = stmt.order_by(Game.title).offset((page - 1) * page_size).limit(page_size)
        return list(self.db.execute(stmt).scalars().all())

    def add(self, game: Game) -> Game:
        self.db.add(game)
        return game

    def delete(self, game: Game) -> None:
        self.db.delete(game)

    def get_session(self, session_id: str) -> GameSession | None:
        stmt = (
            select(GameSession)
            .where(GameSession.id == session_id)
            .options(selectinload(GameSession.game))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_session(self, game_session: GameSession) -> GameSession:
        self.db.add(game_session)
        return game_session

    def list_sessions_for_reservation(self, reservation_id: str) -> list[GameSession]:
        stmt = (
            select(GameSession)
            .where(GameSession.reservation_id == reservation_id)
            .order_by(GameSession.checked_out_at)
        )
        return list(self.db.execute(stmt).scalars().all())
