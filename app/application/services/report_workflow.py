"""Report status workflow: which statuses follow which, and who may move or edit."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.enums import ReportStatus as S, UserRole as R
from app.domain.exceptions import AuthorizationException, InvalidStatusTransitionException


@dataclass(frozen=True)
class StatusTransition:
    """Rules attached to one current status.

    next: statuses the report may move to.
    can_set: roles allowed to move it out of this status.
    can_edit: roles allowed to edit report fields while in this status.
    """

    next: frozenset[S]
    can_set: frozenset[R]
    can_edit: frozenset[R] = frozenset()


def _t(next_: tuple[S, ...], can_set: tuple[R, ...], can_edit: tuple[R, ...] = ()) -> StatusTransition:
    return StatusTransition(frozenset(next_), frozenset(can_set), frozenset(can_edit))


STATUS_TRANSITIONS: dict[S, StatusTransition] = {
    S.DRAFT: _t((S.SUBMITTED_BY_CLIENT,), (R.CLIENT,), (R.CLIENT,)),
    S.SUBMITTED_BY_CLIENT: _t((S.UNDER_PRELIMINARY_TESTING_REVIEW,), (R.MICRO,)),
    S.UNDER_PRELIMINARY_TESTING_REVIEW: _t(
        (
            S.PRELIMINARY_TESTING_ON_HOLD,
            S.PRELIMINARY_TESTING_NEEDS_CORRECTION,
            S.UNDER_QA_PRELIMINARY_REVIEW,
        ),
        (R.MICRO,),
        (R.MICRO, R.ADMIN, R.QA),
    ),
    S.PRELIMINARY_TESTING_ON_HOLD: _t((S.UNDER_PRELIMINARY_TESTING_REVIEW,), (R.MICRO,)),
    S.PRELIMINARY_TESTING_NEEDS_CORRECTION: _t(
        (S.UNDER_CLIENT_PRELIMINARY_CORRECTION,), (R.CLIENT,)
    ),
    S.UNDER_CLIENT_PRELIMINARY_CORRECTION: _t(
        (S.PRELIMINARY_RESUBMISSION_BY_CLIENT,), (R.CLIENT,), (R.CLIENT,)
    ),
    S.PRELIMINARY_RESUBMISSION_BY_CLIENT: _t(
        (S.UNDER_PRELIMINARY_TESTING_REVIEW,), (R.MICRO,)
    ),
    S.UNDER_QA_PRELIMINARY_REVIEW: _t(
        (S.QA_NEEDS_PRELIMINARY_CORRECTION, S.UNDER_CLIENT_PRELIMINARY_REVIEW),
        (R.QA,),
        (R.QA,),
    ),
    S.QA_NEEDS_PRELIMINARY_CORRECTION: _t((S.UNDER_PRELIMINARY_TESTING_REVIEW,), (R.QA,)),
    S.UNDER_CLIENT_PRELIMINARY_REVIEW: _t(
        (S.CLIENT_NEEDS_PRELIMINARY_CORRECTION, S.PRELIMINARY_APPROVED), (R.CLIENT,)
    ),
    S.CLIENT_NEEDS_PRELIMINARY_CORRECTION: _t(
        (S.UNDER_PRELIMINARY_RESUBMISSION_TESTING_REVIEW,), (R.MICRO,)
    ),
    S.UNDER_PRELIMINARY_RESUBMISSION_TESTING_REVIEW: _t(
        (S.UNDER_QA_PRELIMINARY_REVIEW,), (R.MICRO,), (R.MICRO, R.ADMIN, R.QA)
    ),
    S.PRELIMINARY_APPROVED: _t((S.UNDER_FINAL_TESTING_REVIEW,), (R.MICRO,)),
    S.UNDER_FINAL_TESTING_REVIEW: _t(
        (
            S.FINAL_TESTING_ON_HOLD,
            S.FINAL_TESTING_NEEDS_CORRECTION,
            S.UNDER_QA_FINAL_REVIEW,
        ),
        (R.MICRO,),
        (R.MICRO,),
    ),
    S.FINAL_TESTING_ON_HOLD: _t(
        (S.FINAL_TESTING_NEEDS_CORRECTION, S.UNDER_FINAL_TESTING_REVIEW), (R.MICRO,)
    ),
    S.FINAL_TESTING_NEEDS_CORRECTION: _t(
        (S.UNDER_CLIENT_FINAL_CORRECTION,), (R.MICRO, R.ADMIN, R.QA)
    ),
    S.UNDER_CLIENT_FINAL_CORRECTION: _t(
        (S.FINAL_RESUBMISSION_BY_CLIENT,), (R.CLIENT,), (R.CLIENT,)
    ),
    S.FINAL_RESUBMISSION_BY_CLIENT: _t((S.UNDER_FINAL_TESTING_REVIEW,), (R.CLIENT,)),
    S.UNDER_QA_FINAL_REVIEW: _t(
        (S.QA_NEEDS_FINAL_CORRECTION, S.RECEIVED_BY_FRONTDESK),
        (R.MICRO, R.QA),
        (R.QA,),
    ),
    S.QA_NEEDS_FINAL_CORRECTION: _t((S.UNDER_FINAL_TESTING_REVIEW,), (R.QA,)),
    S.RECEIVED_BY_FRONTDESK: _t(
        (S.UNDER_CLIENT_FINAL_REVIEW, S.FRONTDESK_ON_HOLD), (R.FRONTDESK,)
    ),
    S.FRONTDESK_ON_HOLD: _t((S.RECEIVED_BY_FRONTDESK,), (R.FRONTDESK,)),
    S.UNDER_CLIENT_FINAL_REVIEW: _t(
        (S.FINAL_APPROVED, S.CLIENT_NEEDS_FINAL_CORRECTION), (R.CLIENT,)
    ),
    S.CLIENT_NEEDS_FINAL_CORRECTION: _t(
        (S.UNDER_FINAL_RESUBMISSION_TESTING_REVIEW,), (R.ADMIN, R.QA, R.MICRO)
    ),
    S.UNDER_FINAL_RESUBMISSION_TESTING_REVIEW: _t(
        (S.UNDER_FINAL_RESUBMISSION_QA_REVIEW,),
        (R.MICRO, R.ADMIN, R.QA),
        (R.MICRO, R.ADMIN, R.QA),
    ),
    S.UNDER_FINAL_RESUBMISSION_QA_REVIEW: _t(
        (S.RECEIVED_BY_FRONTDESK,), (R.QA,), (R.ADMIN, R.QA)
    ),
    S.FINAL_APPROVED: _t((), ()),
    S.LOCKED: _t((), (R.CLIENT, R.ADMIN, R.SYSTEMADMIN)),
}

# Moving into these statuses requires an electronic signature unless listed here.
ESIGN_EXEMPT_TARGETS = frozenset({S.UNDER_FINAL_TESTING_REVIEW})

# Entering this status assigns the lab report number.
NUMBERING_STATUS = S.UNDER_PRELIMINARY_TESTING_REVIEW

# No field edits in these statuses, whatever the role.
FROZEN_STATUSES = frozenset({S.LOCKED, S.FINAL_APPROVED})


def _rules(status: S) -> StatusTransition:
    try:
        return STATUS_TRANSITIONS[status]
    except KeyError:
        raise InvalidStatusTransitionException(
            status.value, "?", "unknown current status"
        ) from None


def check_transition(current: S, target: S, role: R) -> None:
    """Raise unless role may move a report from current to target.

    Raises:
        AuthorizationException: role is not in the current status's can_set.
        InvalidStatusTransitionException: target is not a next status.
    """
    rules = _rules(current)
    if role not in rules.can_set:
        raise AuthorizationException(
            message=f"Role {role.value} cannot change status from {current.value}"
        )
    if target not in rules.next:
        raise InvalidStatusTransitionException(
            current.value, target.value, "not an allowed next status"
        )


def can_edit(status: S, role: R) -> bool:
    """True if role may edit report fields while the report is in status.

    Clients may edit everything in their own drafts.
    """
    if status in FROZEN_STATUSES:
        return False
    if status == S.DRAFT and role == R.CLIENT:
        return True
    return role in _rules(status).can_edit
