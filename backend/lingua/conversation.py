"""
Conversation practice.

A scenario is a fixed script of dialogue turns. Native speaker turns are
confirmed and skipped past; user turns are checked against the turn's
accepted responses with plain substring containment in both directions.
"""
from __future__ import annotations
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from . import schemas
from .storage import round_half_up


class PlaybackState(str, Enum):
	SHOWING_CONTEXT = "showing_context"
	PLAYING_TURN = "playing_turn"
	AWAITING_INPUT = "awaiting_input"
	FEEDBACK = "feedback"
	COMPLETED = "completed"


class PlaybackError(RuntimeError):
	pass


def normalize_response(text: str) -> str:
	return (text or "").lower().strip()


def matches_accepted_response(text: str, accepted_responses: Iterable[str]) -> bool:
	user_text = normalize_response(text)
	if not user_text:
		return False
	for accepted in accepted_responses:
		candidate = normalize_response(accepted)
		if not candidate:
			continue
		if candidate in user_text or user_text in candidate:
			return True
	return False


def count_user_turns(dialogues: Iterable[schemas.ConversationDialogue]) -> int:
	return sum(1 for d in dialogues if d.speaker_role == "user")


def calculate_accuracy(correct: int, total_user_turns: int) -> int:
	# A script without user turns has nothing to get wrong
	if total_user_turns <= 0:
		return 100
	return round_half_up(correct / total_user_turns * 100)


class ConversationSession:
	"""Plays one scenario script turn by turn and tracks the learner's accuracy."""

	def __init__(self, dialogues: Sequence[schemas.ConversationDialogue]) -> None:
		self.dialogues: List[schemas.ConversationDialogue] = sorted(dialogues, key=lambda d: d.order)
		self.state = PlaybackState.SHOWING_CONTEXT
		self.index = 0
		self.correct_count = 0
		self.last_correct: Optional[bool] = None

	@property
	def total_user_turns(self) -> int:
		return count_user_turns(self.dialogues)

	@property
	def current(self) -> Optional[schemas.ConversationDialogue]:
		if self.state in (PlaybackState.SHOWING_CONTEXT, PlaybackState.COMPLETED):
			return None
		return self.dialogues[self.index]

	@property
	def accuracy(self) -> int:
		return calculate_accuracy(self.correct_count, self.total_user_turns)

	@property
	def expected_phrase(self) -> Optional[str]:
		turn = self.current
		return turn.portuguese if turn is not None else None

	def _require(self, *states: PlaybackState) -> None:
		if self.state not in states:
			raise PlaybackError(f"Not allowed while {self.state.value}")

	def _enter_turn(self, index: int) -> None:
		if index >= len(self.dialogues):
			self.state = PlaybackState.COMPLETED
			return
		self.index = index
		self.last_correct = None
		if self.dialogues[index].speaker_role == "user":
			self.state = PlaybackState.AWAITING_INPUT
		else:
			self.state = PlaybackState.PLAYING_TURN

	def start(self) -> PlaybackState:
		self._require(PlaybackState.SHOWING_CONTEXT)
		self._enter_turn(0)
		return self.state

	def advance(self) -> PlaybackState:
		"""Confirm a native speaker turn, or move on after correct feedback."""
		if self.state is PlaybackState.FEEDBACK and not self.last_correct:
			raise PlaybackError("Retry or skip an incorrect answer")
		self._require(PlaybackState.PLAYING_TURN, PlaybackState.FEEDBACK)
		self._enter_turn(self.index + 1)
		return self.state

	def respond(self, text: str) -> bool:
		self._require(PlaybackState.AWAITING_INPUT)
		turn = self.dialogues[self.index]
		correct = matches_accepted_response(text, turn.accepted_responses)
		if correct:
			self.correct_count += 1
		self.last_correct = correct
		self.state = PlaybackState.FEEDBACK
		return correct

	def retry(self) -> PlaybackState:
		self._require(PlaybackState.FEEDBACK)
		if self.last_correct:
			raise PlaybackError("Turn already answered correctly")
		self.last_correct = None
		self.state = PlaybackState.AWAITING_INPUT
		return self.state

	def skip(self) -> PlaybackState:
		self._require(PlaybackState.AWAITING_INPUT, PlaybackState.FEEDBACK)
		self._enter_turn(self.index + 1)
		return self.state
