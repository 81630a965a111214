import logging
from typing import Any, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from donor_locator.errors import DuplicateDonorError, StorageError, ValidationError
from donor_locator.models import Donor, DonorCreate, DonorMatch
from donor_locator.services.matching import DEFAULT_RADIUS_KM, match, validate_origin
from donor_locator.utils.blood import normalize_blood_group

logger = logging.getLogger(__name__)


def parse_donor_input(payload: Mapping[str, Any]) -> DonorCreate:
    """Validate a registration payload (camelCase or snake_case keys)."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Registration payload must be an object.")
    try:
        return DonorCreate.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


# SQLite reports the column, other backends the constraint name
_PHONE_CONFLICT_MARKERS = ("uq_donor_phone", "donor.phone")


def _is_phone_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return any(marker in message for marker in _PHONE_CONFLICT_MARKERS)


async def register_donor(session: AsyncSession, donor_in: DonorCreate | Mapping[str, Any]) -> int:
    """Insert a new donor and return its id.

    Phone uniqueness is left to the ``uq_donor_phone`` constraint, so of two
    concurrent registrations with one phone exactly one commits.
    """
    if not isinstance(donor_in, DonorCreate):
        donor_in = parse_donor_input(donor_in)

    donor = Donor(**donor_in.model_dump())
    session.add(donor)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if _is_phone_conflict(exc):
            raise DuplicateDonorError(donor_in.phone) from exc
        raise StorageError("Could not store donor.") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StorageError("Could not store donor.") from exc

    logger.info("donor_registered id=%s blood_group=%s", donor.id, donor.blood_group)
    return donor.id  # type: ignore[return-value]


async def find_by_blood_group(session: AsyncSession, blood_group: str) -> list[Donor]:
    """All donors of *blood_group*, in storage order.

    An unrecognized blood group simply matches nobody.
    """
    canonical = normalize_blood_group(blood_group)
    if canonical is None:
        return []
    try:
        result = await session.execute(select(Donor).where(Donor.blood_group == canonical))
    except SQLAlchemyError as exc:
        raise StorageError("Could not read donors.") from exc
    return list(result.scalars().all())


async def search_donors(
    session: AsyncSession,
    origin: Sequence[float],
    blood_group: str,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> list[DonorMatch]:
    """Donors of *blood_group* within *radius_km* of *origin*, nearest first."""
    point = validate_origin(origin)
    candidates = await find_by_blood_group(session, blood_group)
    matches = match(point, candidates, radius_km)
    logger.debug(
        "donor_search blood_group=%s candidates=%d matches=%d",
        blood_group, len(candidates), len(matches),
    )
    return matches
