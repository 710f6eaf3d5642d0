import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import create_document, delete_documents, ensure_indexes, get_documents, indexes_ready
from exceptions import DonorValidationError, DuplicateEmailError, StoreUnavailable
from schemas import BLOOD_GROUPS
from validation import check_donor

logger = logging.getLogger(__name__)

COLLECTION = "donor"
ALL_BLOOD_GROUPS = "All"

# newest first; _id breaks ties between records stamped in the same millisecond
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def _to_millis(moment: datetime) -> datetime:
    # BSON dates keep millisecond precision
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def normalize_blood_group_filter(blood_group: Optional[str]) -> Optional[str]:
    """Turn a ``bloodGroup`` query value into a filter, or None for no filter.

    An unencoded ``+`` in a query string arrives as a space ("O " for "O+"),
    so a trailing space is read back as the positive group.
    """
    if blood_group is None:
        return None
    if blood_group.endswith(" ") and blood_group.strip() + "+" in BLOOD_GROUPS:
        return blood_group.strip() + "+"
    value = blood_group.strip()
    if not value or value == ALL_BLOOD_GROUPS:
        return None
    return value


def create_donor(candidate: Mapping[str, Any], now: datetime = None) -> Dict[str, Any]:
    """Validate and store a new donor, returning the stored document."""
    now = now or datetime.now(timezone.utc)
    record, errors = check_donor(candidate, now=now)
    if errors:
        logger.info("Rejected donor submission: %s", "; ".join(errors))
        raise DonorValidationError(errors)

    stamp = _to_millis(now)
    record["createdAt"] = stamp
    record["updatedAt"] = stamp
    try:
        # email uniqueness lives in the index; never insert without it
        if not indexes_ready():
            ensure_indexes()
        donor_id = create_document(COLLECTION, record)
    except DuplicateKeyError:
        logger.info("Rejected duplicate donor email %s", record["email"])
        raise DuplicateEmailError() from None
    except PyMongoError as exc:
        logger.exception("Failed to store donor %s", record["email"])
        raise StoreUnavailable() from exc

    record["_id"] = ObjectId(donor_id)
    logger.info("Registered donor %s (%s)", donor_id, record["bloodGroup"])
    return record


def list_donors(blood_group: Optional[str] = None) -> List[Dict[str, Any]]:
    query = {}
    group = normalize_blood_group_filter(blood_group)
    if group:
        query["bloodGroup"] = group
    try:
        return get_documents(COLLECTION, query, sort=NEWEST_FIRST)
    except PyMongoError as exc:
        logger.exception("Failed to fetch donors (bloodGroup=%s)", group)
        raise StoreUnavailable("Error fetching donors") from exc


def clear_donors() -> int:
    try:
        deleted = delete_documents(COLLECTION)
    except PyMongoError as exc:
        logger.exception("Failed to clear donors")
        raise StoreUnavailable() from exc
    logger.warning("Cleared %d donor records", deleted)
    return deleted


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def serialize_donor(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a stored donor into its API shape (``_id`` -> ``id``)."""
    data = dict(document)
    data["id"] = str(data.pop("_id"))
    for key in ("lastDonatedDate", "createdAt", "updatedAt"):
        data[key] = _utc(data.get(key))
    return data
