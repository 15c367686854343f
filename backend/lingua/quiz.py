"""
Quiz scoring.

``QuizQuestion.correct_answer`` is the only source of truth: an answer is
correct when the chosen option text equals it exactly. The per-option
``is_correct`` flag is never consulted here.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from . import schemas


def is_correct_answer(question: schemas.QuizQuestion, answer: Optional[str]) -> bool:
	return answer is not None and answer == question.correct_answer


def score_answers(
	questions: Sequence[schemas.QuizQuestion],
	answers: Dict[int, str],
) -> Tuple[int, List[schemas.AnswerResult]]:
	"""Score a full quiz. Unanswered questions count as wrong."""
	results: List[schemas.AnswerResult] = []
	for question in questions:
		answer = answers.get(question.id)
		results.append(
			schemas.AnswerResult(
				question_id=question.id,
				answer=answer,
				correct_answer=question.correct_answer,
				correct=is_correct_answer(question, answer),
				explanation=question.explanation,
			)
		)
	score = sum(1 for r in results if r.correct)
	return score, results


def public_question(
	question: schemas.QuizQuestion,
	options: Sequence[schemas.QuizOption],
) -> schemas.QuizQuestionWithOptions:
	return schemas.QuizQuestionWithOptions(
		**question.model_dump(),
		options=[schemas.QuizOptionPublic(id=o.id, option=o.option) for o in options],
	)
