"""
LOAN SERVICE
============

Handles:
- Creating loan applications for a member
- Listing and looking up loans
- Status changes (pending / approved / rejected)
- Generic updates and deletion
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from welfare.errors import InvalidStatus, NotFound, ServerError, ValidationError, WelfareError
from welfare.extensions import db
from welfare.models import Loan, LoanStatus, Member

logger = logging.getLogger(__name__)


# ============================================================
# CREATE LOAN APPLICATION
# ============================================================

def create_loan(member_id, fields):
    """
    Create a loan for ``member_id`` and add it to the member's loan list.

    The loan row and the member's list are written in one transaction:
    the list is the relationship over loans.member_id, so either both
    are committed or neither is.
    """
    try:
        member = db.session.get(Member, member_id)
        if member is None:
            raise NotFound('Member not found')

        try:
            loan = Loan(loan_status=LoanStatus.PENDING.value, **fields)
        except ValueError as e:
            raise ValidationError(str(e))

        member.loans.append(loan)
        db.session.commit()

        logger.info(f"Loan {loan.id} created for member {member.id}: amount={loan.amount}")
        return loan

    except WelfareError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to create loan: {str(e)}")


# ============================================================
# QUERIES
# ============================================================

def list_loans_for_member(member_id):
    member = db.session.get(Member, member_id)
    if member is None:
        logger.warning(f"Loan listing failed: member {member_id} not found")
        raise NotFound('Member not found')
    return member.loans


def list_loans(status=None):
    """All loans, optionally restricted to one status."""
    query = Loan.query
    if status is not None:
        if status not in LoanStatus.values():
            raise InvalidStatus()
        query = query.filter_by(loan_status=status)
    return query.order_by(Loan.created_at).all()


def get_loan(loan_id, message='Loan application not found'):
    loan = db.session.get(Loan, loan_id)
    if loan is None:
        raise NotFound(message)
    return loan


# ============================================================
# STATUS CHANGES
# ============================================================

def update_loan_status(loan_id, new_status):
    """
    Move a loan to ``new_status``.

    Any status may follow any other; the value itself must be one of
    pending, approved or rejected. The record is left untouched when
    the value is rejected.
    """
    if new_status not in LoanStatus.values():
        logger.warning(f"Rejected status {new_status!r} for loan {loan_id}")
        raise InvalidStatus()

    loan = get_loan(loan_id, message='Loan not found')
    previous = loan.loan_status

    try:
        loan.loan_status = new_status
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to update loan status: {str(e)}")

    logger.info(f"Loan {loan.id} status {previous} -> {new_status}")
    return loan


# ============================================================
# UPDATE / DELETE
# ============================================================

def update_loan(loan_id, fields):
    """Apply a validated partial update to a loan."""
    loan = get_loan(loan_id)
    try:
        for key, value in fields.items():
            setattr(loan, key, value)
        db.session.commit()

        logger.info(f"Updated loan {loan.id}: {sorted(fields)}")
        return loan

    except ValueError as e:
        db.session.rollback()
        raise ValidationError(str(e))
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to update loan: {str(e)}")


def delete_loan(loan_id):
    """Hard-delete a loan; it disappears from its member's list with it."""
    loan = get_loan(loan_id)
    try:
        db.session.delete(loan)
        db.session.commit()
        logger.info(f"Deleted loan {loan_id}")
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to delete loan: {str(e)}")
