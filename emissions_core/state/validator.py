"""
Optimistic concurrency control for emission reports

A report's version is its entity tag: a digest over the canonical JSON
serialization of every field of the report, including its timestamps.
Tags are never stored, but recomputed from the current state whenever
they are needed. Writers have to present the tag of the state they
based their changes on, which is validated before any change happens.

The functions of this module are pure: they neither hold state across
calls nor acquire any locks. Callers are responsible for performing
``admit_write`` and ``apply_mutation`` for the same report id in one
critical section (see ``state.store.ReportStore``).
"""

import enum
import json
import hashlib
import datetime
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Union

import pydantic

from .. import schemas


EDITABLE_FIELDS = frozenset(schemas.ReportPatch.model_fields)


@enum.unique
class Reason(enum.Enum):
    PRECONDITION_REQUIRED = "PreconditionRequired"
    PRECONDITION_FAILED = "PreconditionFailed"


class Admitted(NamedTuple):
    token: str


class Rejected(NamedTuple):
    reason: Reason
    token: str


Admission = Union[Admitted, Rejected]
ClientToken = Union[None, str, Iterable[str]]


def compute_token(resource: Union[pydantic.BaseModel, Mapping[str, Any]]) -> str:
    """
    Create a static and unambiguous entity tag based on the current content of a resource

    Fields are serialized sorted by name, so the tag doesn't depend on
    any mapping order. The name of the model class is part of the digest,
    so different kinds of resources with equal fields don't share tags.

    :param resource: pydantic model or mapping of JSON-serializable values
    :return: hex digest of fixed length identifying the current content
    """

    cls = type(resource).__name__
    if isinstance(resource, pydantic.BaseModel):
        representation = resource.model_dump(mode="json")
    else:
        representation = dict(resource)
    dump = json.dumps(representation, sort_keys=True, separators=(",", ":"), allow_nan=False, default=str)
    return hashlib.sha256((cls + dump).encode("UTF-8")).hexdigest()


def admit_write(resource: schemas.Report, client_token: ClientToken) -> Admission:
    """
    Decide whether a write based on the given client tag may be applied to the resource

    The client may present one tag or a collection of candidate tags (e.g.
    from a list in the ``If-Match`` header); the write is admitted if one of
    them equals the tag of the resource as given *now*. A missing tag or
    an empty collection of tags means the client didn't synchronize at all.

    :param resource: current state of the resource in question
    :param client_token: tag(s) presented by the client or None
    :return: ``Admitted`` with the current tag or ``Rejected`` with reason and current tag
    """

    current = compute_token(resource)
    if client_token is None:
        return Rejected(Reason.PRECONDITION_REQUIRED, current)
    candidates = [client_token] if isinstance(client_token, str) else list(client_token)
    if not any(candidates):
        return Rejected(Reason.PRECONDITION_REQUIRED, current)
    if current not in candidates:
        return Rejected(Reason.PRECONDITION_FAILED, current)
    return Admitted(current)


def next_timestamp(previous: Optional[datetime.datetime] = None) -> datetime.datetime:
    """
    Return the current UTC time, but always strictly later than the previous timestamp
    """

    now = datetime.datetime.now(datetime.timezone.utc)
    if previous is not None and now <= previous:
        return previous + datetime.timedelta(microseconds=1)
    return now


def apply_mutation(resource: schemas.Report, changes: Mapping[str, Any]) -> schemas.Report:
    """
    Create the next version of a report by applying the given partial changes

    Fields missing in ``changes`` keep their values. The modification time
    is refreshed in any case, so the entity tag of the result differs from
    the original's tag even if no editable field changed its value.

    :param resource: current state of the report
    :param changes: mapping of editable field names to their new values
    :return: new report instance (the given instance is left untouched)
    :raises ValueError: when a non-editable field is part of the changes
    :raises pydantic.ValidationError: when the changed report would be invalid
    """

    forbidden = set(changes) - EDITABLE_FIELDS
    if forbidden:
        raise ValueError(f"Fields {sorted(forbidden)} can't be changed")

    values = resource.model_dump()
    values.update(changes)
    values["updated_at"] = next_timestamp(resource.updated_at)
    return schemas.Report.model_validate(values)
