"""Asset lifecycle rules.

Pure functions that derive an asset's status from its condition and
assignment state, and validate a proposed mutation before it is persisted.
Nothing here touches the database or the request; records are read through
their ``condition``, ``status``, ``employee_id`` and ``id`` attributes, so
models and plain objects work alike.

Validators return ``None`` on success or an error instance from
:mod:`asset_registry.app.errors`. Callers decide whether to raise it.
"""
from collections import namedtuple
from datetime import date, datetime
from enum import Enum

from asset_registry.app.errors import (AssetInUse, AssetNotServiceable,
                                       EmployeeHasAssignedAssets, FutureDate,
                                       InvalidDateOrder)


class AssetCondition(Enum):
    NEW = "New"
    GOOD = "Good"
    NEEDS_REPAIR = "Needs Repair"
    DAMAGED = "Damaged"


class AssetStatus(Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    UNDER_REPAIR = "Under Repair"
    RETIRED = "Retired"


class AssignmentPolicy(Enum):
    PERMISSIVE = "permissive"
    STRICT = "strict"


SERVICEABLE_CONDITIONS = frozenset({AssetCondition.NEW, AssetCondition.GOOD})

# Status forced by a non-serviceable condition, regardless of assignment.
_CONDITION_OVERRIDES = {
    AssetCondition.NEEDS_REPAIR: AssetStatus.UNDER_REPAIR,
    AssetCondition.DAMAGED: AssetStatus.RETIRED,
}

Transition = namedtuple('Transition', ['status', 'employee_id'])


def is_serviceable(condition):
    return condition in SERVICEABLE_CONDITIONS


def derive_status_on_create(condition):
    if is_serviceable(condition):
        return AssetStatus.AVAILABLE
    return _CONDITION_OVERRIDES[condition]


def derive_status_on_update(condition, current_status):
    """Status after a condition edit.

    An assignment survives an edit between New and Good, but a damaged or
    broken asset drops out of it.
    """
    if is_serviceable(condition):
        if current_status == AssetStatus.ASSIGNED:
            return AssetStatus.ASSIGNED
        return AssetStatus.AVAILABLE
    return _CONDITION_OVERRIDES[condition]


def validate_date_order(start, end, message=None):
    if end is not None and end < start:
        return InvalidDateOrder(message or f"{end} cannot be earlier than {start}.")
    return None


def validate_purchase_date(value, now=None):
    if value is None:
        return None
    if isinstance(value, datetime):
        now = now or datetime.now()
    else:
        now = now or date.today()
    if value > now:
        return FutureDate("Purchase date cannot be in the future.")
    return None


def check_assignable(asset, open_assignment=None, policy=AssignmentPolicy.PERMISSIVE):
    """An asset can be held by one employee at a time.

    Under the strict policy only New or Good assets can be handed out; the
    permissive policy also records hand-overs of broken ones.
    """
    if (open_assignment is not None or asset.employee_id is not None
            or asset.status == AssetStatus.ASSIGNED):
        return AssetInUse("Asset is already assigned to an employee.")
    if policy == AssignmentPolicy.STRICT and not is_serviceable(asset.condition):
        return AssetNotServiceable(
            f"An asset in '{asset.condition.value}' condition cannot be assigned.")
    return None


def on_assign(asset, employee):
    # A damaged or broken asset keeps the status its condition dictates,
    # but the employee reference is still recorded.
    if is_serviceable(asset.condition):
        return Transition(AssetStatus.ASSIGNED, employee.id)
    return Transition(derive_status_on_create(asset.condition), employee.id)


def on_return(asset):
    return Transition(derive_status_on_update(asset.condition, AssetStatus.AVAILABLE), None)


def check_asset_deletable(asset):
    if asset.status == AssetStatus.ASSIGNED:
        return AssetInUse("Cannot delete asset while it is assigned.")
    return None


def check_employee_deletable(employee):
    if any(asset.status == AssetStatus.ASSIGNED for asset in employee.assets):
        return EmployeeHasAssignedAssets("Cannot delete employee with assigned assets.")
    return None


def first_error(*results):
    for result in results:
        if result is not None:
            return result
    return None
