import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from src.domain.enums import GameCondition
from src.domain.exceptions import (
    DuplicateGameError,
    GameInUseError,
    GameNotFoundError,
    GameRuleError,
    GameSessionNotFoundError,
    GameUnavailableError,
    ReservationNotFoundError,
)
from src.domain.game_availability import GameAvailability
from src.infrastructure.db.models import Game, GameSession
from src.infrastructure.repositories.game_repository import GameFilter, GameRepository
from src.infrastructure.repositories.reservation_repository import ReservationRepository


logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _copies_phrase(count: int) -> str:
    return f"{count} copy is" if count == 1 else f"{count} copies are"


class GameService:
    """Game catalog maintenance and lending of physical copies."""

    def __init__(self, db: Session):
        self.db = db
        self.game_repository = GameRepository(db)
        self.reservation_repository = ReservationRepository(db)

    def list_games(self, filters: GameFilter, page: int = 1, page_size: int = 10) -> list[Game]:
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        return self.game_repository.list_games(filters, page, page_size)

    def get_game(self, game_id: str) -> Game:
        game = self.game_repository.get_by_id(game_id)
        if not game:
            raise GameNotFoundError(game_id)
        return game

    def create_game(self, **fields) -> Game:
        if fields["min_players"] > fields["max_players"]:
            raise GameRuleError("MinPlayers must be less than or equal to MaxPlayers")
        if self.game_repository.find_by_title(fields["title"]):
            raise DuplicateGameError(f"A game with the title '{fields['title']}' already exists")

        game = self.game_repository.add(Game(copies_in_use=0, **fields))
        self.db.flush()

        logger.info("Game added to catalog. game_id=%s title=%s", game.id, game.title)
        return game

    def update_game(self, game_id: str, **fields) -> Game:
        if fields["min_players"] > fields["max_players"]:
            raise GameRuleError("MinPlayers must be less than or equal to MaxPlayers")
        if fields["copies_in_use"] > fields["copies_owned"]:
            raise GameRuleError("CopiesInUse cannot exceed CopiesOwned")

        game = self.get_game(game_id)
        if self.game_repository.find_by_title(fields["title"], exclude_id=game.id):
            raise DuplicateGameError(f"Another game with the title '{fields['title']}' already exists")

        for name, value in fields.items():
            setattr(game, name, value)
        self.db.flush()
        return game

    def delete_game(self, game_id: str) -> None:
        game = self.get_game(game_id)
        if game.copies_in_use > 0:
            raise GameInUseError(
                f"Cannot delete game '{game.title}' because "
                f"{_copies_phrase(game.copies_in_use)} currently in use"
            )

        self.game_repository.delete(game)
        self.db.flush()
        logger.info("Game removed from catalog. game_id=%s", game_id)

    def check_out(
        self,
        game_id: str,
        reservation_id: str,
        due_back_at: datetime | None = None,
    ) -> GameSession:
        game = self.get_game(game_id)
        if not self.reservation_repository.get_by_id(reservation_id):
            raise ReservationNotFoundError(reservation_id)
        if GameAvailability.available_copies(game) == 0:
            raise GameUnavailableError(f"No copies of '{game.title}' are available")

        game.copies_in_use += 1
        game_session = self.game_repository.add_session(
            GameSession(
                game_id=game.id,
                reservation_id=reservation_id,
                checked_out_at=datetime.now(timezone.utc),
                due_back_at=due_back_at,
            )
        )
        game_session.game = game
        self.db.flush()

        logger.info(
            "Game checked out. session_id=%s game_id=%s reservation_id=%s in_use=%s/%s",
            game_session.id,
            game.id,
            reservation_id,
            game.copies_in_use,
            game.copies_owned,
        )
        return game_session

    def return_game(
        self,
        session_id: str,
        condition: GameCondition,
        returned_at: datetime | None = None,
    ) -> GameSession:
        """
        Closes a lending session. The late fee is charged against due_back_at
        when one was set; sessions without a due time are never late.
        """
        game_session = self.game_repository.get_session(session_id)
        if not game_session:
            raise GameSessionNotFoundError(session_id)
        if game_session.returned_at is not None:
            raise GameRuleError("Game session has already been returned")

        returned_at = returned_at or datetime.now(timezone.utc)
        game_session.returned_at = returned_at
        game_session.condition = condition
        if game_session.due_back_at is not None:
            game_session.late_fee_applied = GameAvailability.calculate_late_fee(
                game_session.due_back_at,
                returned_at,
            )

        game = game_session.game
        game.copies_in_use = max(0, game.copies_in_use - 1)
        self.db.flush()

        if game_session.late_fee_applied:
            logger.warning(
                "Game returned late. session_id=%s game_id=%s late_fee=%s",
                game_session.id,
                game.id,
                game_session.late_fee_applied,
            )
        return game_session

    def list_sessions_for_reservation(self, reservation_id: str) -> list[GameSession]:
        if not self.reservation_repository.get_by_id(reservation_id):
            raise ReservationNotFoundError(reservation_id)
        return self.game_repository.list_sessions_for_reservation(reservation_id)
