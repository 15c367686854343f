from __future__ import annotations
import unicodedata
from typing import List

from . import schemas
from .storage import Storage


def _sort_key(text: str) -> str:
	# Accent- and case-insensitive, so "Água" sorts next to "agua"
	decomposed = unicodedata.normalize("NFKD", text)
	return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def search_vocabulary(storage: Storage, term: str) -> List[schemas.VocabularySearchResult]:
	"""Scan every lesson's vocabulary for ``term`` in either language.

	Exact matches on either field come first, the rest alphabetically by the
	Portuguese word.
	"""
	needle = term.lower()
	results: List[schemas.VocabularySearchResult] = []
	for lesson in storage.get_lessons():
		for item in storage.get_vocabulary_by_lesson_id(lesson.id):
			if needle in item.portuguese.lower() or needle in item.english.lower():
				results.append(
					schemas.VocabularySearchResult(
						**item.model_dump(),
						lesson_title=lesson.title,
					)
				)

	def relevance(item: schemas.VocabularySearchResult):
		exact = item.portuguese.lower() == needle or item.english.lower() == needle
		return (not exact, _sort_key(item.portuguese), item.portuguese)

	results.sort(key=relevance)
	return results
