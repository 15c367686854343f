from __future__ import annotations
from datetime import date
from typing import Optional, Sequence, Tuple

from . import schemas
from .settings import settings
from .storage import round_half_up


# (minimum progress percentage, tier), highest first
CERTIFICATE_TIERS: Sequence[Tuple[int, str]] = (
	(90, "expert"),
	(70, "advanced"),
	(50, "intermediate"),
	(0, "beginner"),
)


class NotEligibleError(Exception):
	pass


def certificate_level(percentage: int) -> str:
	for threshold, tier in CERTIFICATE_TIERS:
		if percentage >= threshold:
			return tier
	return CERTIFICATE_TIERS[-1][1]


def build_certificate(
	user: schemas.User,
	completed_lessons: int,
	total_lessons: int,
	*,
	min_percentage: Optional[int] = None,
	issued_on: Optional[date] = None,
) -> schemas.Certificate:
	if min_percentage is None:
		min_percentage = settings.certificate_min_percentage
	if total_lessons <= 0 or completed_lessons <= 0:
		raise NotEligibleError("You haven't completed enough lessons to earn a certificate yet.")
	percentage = round_half_up(completed_lessons / total_lessons * 100)
	if percentage < min_percentage:
		raise NotEligibleError("You haven't completed enough lessons to earn a certificate yet.")

	issued_on = issued_on or date.today()
	return schemas.Certificate(
		user_id=user.id,
		user_name=user.display_name,
		completed_lessons=completed_lessons,
		total_lessons=total_lessons,
		progress_percentage=percentage,
		certificate_level=certificate_level(percentage),
		certificate_date=issued_on.isoformat(),
		serial_number=f"LP-{user.id}-{issued_on:%Y%m%d}-{completed_lessons}",
	)
