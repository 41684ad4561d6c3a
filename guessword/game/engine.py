import asyncio
import logging
import math
import random
import time
from enum import Enum
from typing import Awaitable, Callable

from ..config import RoundSettings
from ..models import (
    CorrectGuessEvent,
    ErrorEvent,
    GameStateEvent,
    GuessEvent,
    GuessRecord,
    NewRoundEvent,
    OutboundEvent,
    PlayerListEvent,
    PlayerScore,
    Round,
    RoundEndedEvent,
    TimerEvent,
)
from ..services import ScoreStore, WordSource
from .broadcaster import Broadcaster
from .errors import BudgetExceeded
from .registry import PlayerRegistry
from .scheduler import Scheduler
from .scoring import calculate_score, max_guesses_per_player

log = logging.getLogger(__name__)

FALLBACK_WORDS = ("HOUSE", "MAGIC", "PHONE", "WORLD", "BREAD", "MUSIC", "LIGHT")

TIMER = "timer"
TRANSITION = "transition"


class EngineState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDING = "ending"


class RoundEngine:
    """Owns the round lifecycle: IDLE -> ACTIVE -> ENDING -> (ACTIVE | IDLE).

    The engine is the only code that mutates round state and per-round player
    counters. It runs on a single event loop; the countdown and the delayed
    transitions are scheduler tasks, so at most one of them per slot exists.
    """

    def __init__(
        self,
        registry: PlayerRegistry,
        broadcaster: Broadcaster,
        word_source: WordSource | None = None,
        score_store: ScoreStore | None = None,
        settings: RoundSettings | None = None,
        on_disconnect: Callable[[str], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.word_source = word_source
        self.score_store = score_store
        self.settings = settings or RoundSettings()
        self.on_disconnect = on_disconnect
        self.clock = clock
        self.rng = rng or random.Random()
        self.scheduler = Scheduler()

        self.state = EngineState.IDLE
        self.round_number = 0
        self.last_solution: str | None = None
        self._round: Round | None = None
        self._starting = False

    @property
    def current_round(self) -> Round | None:
        return self._round

    @property
    def is_idle(self) -> bool:
        return self.state is EngineState.IDLE and not self._starting

    def max_guesses_per_player(self) -> int:
        return max_guesses_per_player(self.registry.count())

    # -- delivery

    async def emit(self, event: OutboundEvent) -> None:
        failed = await self.broadcaster.broadcast_all(event)
        await self._drop(failed)

    async def notify(self, name: str, event: OutboundEvent) -> None:
        if not await self.broadcaster.send_one(name, event) and name in self.registry:
            await self._drop([name])

    async def _drop(self, names: list[str]) -> None:
        for name in names:
            if self.on_disconnect is not None:
                # the membership broadcast must finish even if the caller is cancelled
                await asyncio.shield(self.on_disconnect(name))
            else:
                self.registry.leave(name)

    # -- lifecycle

    async def start_round(self) -> bool:
        if self._round is not None or self._starting:
            return False
        if self.registry.count() < 1:
            self.state = EngineState.IDLE
            return False

        self._starting = True
        try:
            self.scheduler.cancel_all()
            word = await self._pick_word()
            if self.registry.count() < 1:
                log.info("All players left before the round could start")
                self.state = EngineState.IDLE
                return False

            self.round_number += 1
            self.registry.reset_round_counters()
            self._round = Round(
                word=word,
                number=self.round_number,
                started_at=self.clock(),
                remaining=self.settings.round_duration,
            )
            self.state = EngineState.ACTIVE
        finally:
            self._starting = False

        round_ = self._round
        log.info(f"Round {round_.number} started with word: {round_.word}")
        await self.emit(
            NewRoundEvent(
                word=round_.word,
                round_number=round_.number,
                duration=self.settings.round_duration,
                last_word=self.last_solution,
                max_guesses=self.max_guesses_per_player(),
            )
        )
        if self._round is round_ and round_.accepts_guesses:
            self.scheduler.schedule(TIMER, 0, lambda: self._countdown(round_))
        return True

    async def _countdown(self, round_: Round) -> None:
        while self._round is round_ and round_.accepts_guesses:
            await asyncio.sleep(self.settings.tick_interval)
            if self._round is not round_:
                return
            await self.tick()

    async def tick(self) -> None:
        round_ = self._round
        if self.state is not EngineState.ACTIVE or round_ is None or not round_.accepts_guesses:
            return

        round_.remaining = max(0, round_.remaining - 1)
        if round_.remaining == 0:
            # late guesses must not be scored while the end is being broadcast
            round_.active = False

        await self.emit(TimerEvent(seconds_left=round_.remaining))
        if round_.remaining == 0:
            log.info("Time is up, ending round")
            await self.end_round("timeout")

    async def end_round(self, reason: str) -> bool:
        round_ = self._round
        if round_ is None or self.state is not EngineState.ACTIVE:
            return False

        self.state = EngineState.ENDING
        round_.active = False
        self.scheduler.cancel(TIMER)
        self.scheduler.cancel(TRANSITION)
        self.last_solution = round_.word

        for player in self.registry.players():
            if player.round_score > 0:
                await self._persist_score(player.name, player.round_score)
                player.total_score += player.round_score

        log.info(f"Round {round_.number} ended. Solution: {round_.word}, reason: {reason}")
        await self.emit(
            RoundEndedEvent(
                solution=round_.word,
                round_number=round_.number,
                reason=reason,
                guesses=list(round_.guesses),
                duration=self.settings.round_duration - round_.remaining,
                player_scores=self.player_scores(),
            )
        )
        self._round = None

        if self.registry.count() > 0:
            self.scheduler.schedule(TRANSITION, self.settings.next_round_delay, self.start_round)
        else:
            self.state = EngineState.IDLE
        return True

    async def shutdown(self) -> None:
        await self.scheduler.aclose()
        if self._round is not None:
            self._round.active = False
        self._round = None
        self.state = EngineState.IDLE

    # -- guesses

    async def add_guess(self, name: str, raw_guess: str) -> bool:
        player = self.registry.get(name)
        if player is None:
            return False

        round_ = self._round
        if round_ is None or not round_.accepts_guesses:
            await self.notify(name, ErrorEvent(message="No active round, wait for the next one."))
            return False

        max_guesses = self.max_guesses_per_player()
        try:
            self._check_budget(player.guess_count, round_.total_guesses, max_guesses)
        except BudgetExceeded as e:
            await self.notify(name, ErrorEvent(message=str(e)))
            return False

        player.guess_count += 1
        round_.total_guesses += 1
        time_used = math.floor(self.clock() - round_.started_at)
        guess = raw_guess.strip().upper()
        correct = guess == round_.word
        score = calculate_score(
            player.guess_count,
            time_used,
            correct,
            self.registry.count(),
            self.settings.round_duration,
        )
        player.round_score += score

        record = GuessRecord(
            user=name,
            guess=guess,
            guess_number=player.guess_count,
            total_guess_number=round_.total_guesses,
            correct=correct,
            score=score,
            time_used=time_used,
        )
        round_.guesses.append(record)

        cap_reached = round_.total_guesses >= self.settings.max_total_guesses
        if correct or cap_reached:
            round_.resolved = True
            self.scheduler.cancel(TIMER)

        log.info(
            f"{name} guessed {guess} ({player.guess_count}/{max_guesses}, "
            f"total: {round_.total_guesses}/{self.settings.max_total_guesses}) - {score} points"
        )
        await self.emit(GuessEvent.from_record(record))

        if correct:
            log.info(f"{name} guessed the word!")
            await self.emit(CorrectGuessEvent(user=name, word=round_.word, score=score))
            self._schedule_end(round_, "solved")
        elif cap_reached:
            log.info("Maximum total guesses reached, ending round")
            self._schedule_end(round_, "max_guesses")
        return True

    def _check_budget(self, guess_count: int, total_guesses: int, max_guesses: int) -> None:
        if guess_count >= max_guesses:
            raise BudgetExceeded(f"Maximum guesses reached! ({guess_count}/{max_guesses})")
        if total_guesses >= self.settings.max_total_guesses:
            raise BudgetExceeded(
                f"Maximum total of {self.settings.max_total_guesses} guesses reached!"
            )

    def _schedule_end(self, round_: Round, reason: str) -> None:
        async def finish() -> None:
            if self._round is round_:
                await self.end_round(reason)

        self.scheduler.schedule(TRANSITION, self.settings.reveal_delay, finish)

    # -- collaborators

    async def _pick_word(self) -> str:
        if self.word_source is not None:
            try:
                word = await asyncio.wait_for(
                    self.word_source.fetch_random_word(), self.settings.collaborator_timeout
                )
                word = word.strip().upper()
                if word:
                    return word
                log.warning("Word source returned an empty word")
            except Exception as e:
                log.error(f"Word source error: {e!r}")

        word = self.rng.choice(FALLBACK_WORDS)
        log.info(f"Using fallback word: {word}")
        return word

    async def _persist_score(self, name: str, score: int) -> None:
        if self.score_store is None:
            return
        timeout = self.settings.collaborator_timeout
        try:
            best = await asyncio.wait_for(self.score_store.get_best_score(name), timeout)
            if score > best:
                await asyncio.wait_for(self.score_store.save_score(name, score), timeout)
                log.info(f"Saved score for {name}: {score}")
            else:
                log.info(f"No new highscore for {name}: {score} <= {best}")
        except Exception as e:
            log.error(f"Error saving score for {name}: {e!r}")

    # -- views

    def player_scores(self) -> dict[str, PlayerScore]:
        return {
            player.name: PlayerScore(
                round_score=player.round_score,
                total_score=player.total_score,
                guess_count=player.guess_count,
            )
            for player in self.registry.players()
        }

    def player_list(self) -> PlayerListEvent:
        return PlayerListEvent(players=self.registry.summary(self.max_guesses_per_player()))

    def snapshot(self, name: str) -> GameStateEvent | None:
        player = self.registry.get(name)
        if player is None:
            return None

        round_ = self._round
        max_guesses = self.max_guesses_per_player()
        return GameStateEvent(
            current_word=round_.word if round_ else None,
            word_length=len(round_.word) if round_ else None,
            time_remaining=round_.remaining if round_ else 0,
            round_number=self.round_number,
            last_word=self.last_solution,
            players=self.registry.summary(max_guesses),
            guesses=list(round_.guesses) if round_ else [],
            player_guess_count=player.guess_count,
            max_guesses=max_guesses,
            game_active=round_ is not None,
        )
