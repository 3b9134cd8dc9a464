from dataclasses import dataclass, replace
from typing import Optional

from codechallenge.models.challenge import Challenge

NEUTRAL = "neutral"
CORRECT = "correct"
INCORRECT = "incorrect"


@dataclass(frozen=True)
class AnswerState:
    """Selection state of one rendered challenge. Answered once selected_index is set."""

    selected_index: Optional[int] = None
    explanation_visible: bool = False

    @property
    def answered(self) -> bool:
        return self.selected_index is not None


def initial_state(*, show_explanation: bool = False) -> AnswerState:
    return AnswerState(selected_index=None, explanation_visible=show_explanation)


def select(state: AnswerState, index: int, *, option_count: int) -> AnswerState:
    # latched: only the first valid pick counts
    if state.answered:
        return state
    if not (0 <= index < option_count):
        return state
    return replace(state, selected_index=index, explanation_visible=True)


def option_style(challenge: Challenge, state: AnswerState, index: int) -> str:
    if not state.answered:
        return NEUTRAL
    if index == challenge.correct_answer_id:
        return CORRECT
    if index == state.selected_index:
        return INCORRECT
    return NEUTRAL


def is_correct(challenge: Challenge, state: AnswerState) -> Optional[bool]:
    if not state.answered:
        return None
    return state.selected_index == challenge.correct_answer_id
