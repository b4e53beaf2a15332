# models.py
import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict

from transaction_service.errors import ValidationError

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

REQUIRED_CREATE_FIELDS = ("amount", "transaction_type", "user")


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# PENDING is only ever set at creation
UPDATABLE_STATUSES = (TransactionStatus.COMPLETED, TransactionStatus.FAILED)


# BSON integers are signed 64-bit
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def _check_int64(number: int, message: str) -> int:
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValidationError(message)
    return number


def parse_user_id(value: Any, field: str = "user") -> int:
    """Parse an integer-like user id, raising ValidationError instead of guessing."""
    message = f"{field} must be an integer"
    if isinstance(value, bool):
        raise ValidationError(message)
    if isinstance(value, int):
        return _check_int64(value, message)
    if isinstance(value, float):
        if value.is_integer():
            return _check_int64(int(value), message)
        raise ValidationError(message)
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return _check_int64(int(value.strip()), message)
    raise ValidationError(message)


def parse_amount(value: Any) -> Union[int, float, str]:
    """Check that amount is numeric; numeric strings are kept as given."""
    message = "amount must be numeric"
    if isinstance(value, bool):
        raise ValidationError(message)
    if isinstance(value, int):
        return _check_int64(value, message)
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(message)
    else:
        raise ValidationError(message)
    if not math.isfinite(number):
        raise ValidationError(message)
    return value


def parse_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise ValidationError("Invalid transaction id")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError("Invalid transaction id")


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision, which BSON datetimes cannot hold."""
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request body")
    return payload


class TransactionCreate(BaseModel):
    amount: Union[int, float, str]
    transaction_type: str
    user: int

    @classmethod
    def from_payload(cls, payload: Any) -> "TransactionCreate":
        payload = _require_object(payload)
        if not all(payload.get(name) for name in REQUIRED_CREATE_FIELDS):
            raise ValidationError("Missing required fields")

        transaction_type = payload["transaction_type"]
        if not isinstance(transaction_type, str):
            raise ValidationError("transaction_type must be a string")

        return cls(
            amount=parse_amount(payload["amount"]),
            transaction_type=transaction_type,
            user=parse_user_id(payload["user"]),
        )

    def to_document(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Build the document to insert; status and timestamp are never caller-supplied."""
        return {
            "amount": self.amount,
            "transaction_type": self.transaction_type,
            "user": self.user,
            "timestamp": truncate_to_millis(now or datetime.now(timezone.utc)),
            "status": TransactionStatus.PENDING.value,
        }


class StatusUpdate(BaseModel):
    status: TransactionStatus

    @classmethod
    def from_payload(cls, payload: Any) -> "StatusUpdate":
        payload = _require_object(payload)
        status = payload.get("status")
        if status not in [s.value for s in UPDATABLE_STATUSES]:
            raise ValidationError("Invalid status")
        return cls(status=status)


class Transaction(BaseModel):
    """A stored transaction as returned to API callers"""

    model_config = ConfigDict(use_enum_values=True)

    id: str
    amount: Union[int, float, str]
    transaction_type: str
    user: int
    timestamp: datetime
    status: TransactionStatus

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Transaction":
        timestamp = doc["timestamp"]
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            id=str(doc["_id"]),
            amount=doc["amount"],
            transaction_type=doc["transaction_type"],
            user=doc["user"],
            timestamp=timestamp,
            status=doc["status"],
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
