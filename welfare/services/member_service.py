"""
MEMBER SERVICE
==============

Handles:
- Registration (with uniqueness checks)
- Login by email or EPF number
- Profile lookups, updates and deletion
"""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from welfare.errors import (
    DuplicateError, Forbidden, InvalidCredentials, NotFound, ServerError,
    ValidationError, WelfareError
)
from welfare.extensions import db
from welfare.models import Member

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = ('email', 'epf', 'welfare_no')


def _find_duplicate(email=None, epf=None, welfare_no=None, exclude_id=None):
    """Return an existing member sharing any of the unique fields."""
    conditions = []
    if email:
        conditions.append(Member.email == email.strip().lower())
    if epf:
        conditions.append(Member.epf == epf)
    if welfare_no:
        conditions.append(Member.welfare_no == welfare_no)
    if not conditions:
        return None

    query = Member.query.filter(or_(*conditions))
    if exclude_id is not None:
        query = query.filter(Member.id != exclude_id)
    return query.first()


def _is_unique_violation(error):
    """True when an IntegrityError comes from a unique constraint."""
    message = str(error.orig).lower()
    return 'unique' in message or 'duplicate' in message


def _apply_fields(member, fields):
    password = fields.pop('password', None)
    try:
        for key, value in fields.items():
            setattr(member, key, value)
    except ValueError as e:
        raise ValidationError(str(e))
    if password:
        member.set_password(password)


# ============================================================
# REGISTRATION
# ============================================================

def register_member(fields):
    """
    Create a new member from validated registration fields.

    Rejects the registration if the email, EPF number or welfare
    number already belongs to someone else.
    """
    try:
        if _find_duplicate(fields.get('email'), fields.get('epf'), fields.get('welfare_no')):
            raise DuplicateError('User already exists')

        member = Member()
        _apply_fields(member, dict(fields))
        db.session.add(member)
        db.session.commit()

        logger.info(f"Registered new member: {member.id} - {member.epf}")
        return member

    except IntegrityError as e:
        db.session.rollback()
        if not _is_unique_violation(e):
            raise ValidationError('Member data violates a required field')
        # A concurrent registration won the race on a unique column
        logger.warning(f"Registration failed: duplicate member for epf {fields.get('epf')}")
        raise DuplicateError('User already exists')
    except WelfareError:
        db.session.rollback()
        logger.warning(f"Registration rejected for epf {fields.get('epf')}")
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to register member: {str(e)}")


# ============================================================
# AUTHENTICATION
# ============================================================

def authenticate(password, epf=None, email=None):
    """
    Return the member whose email or EPF number matches and whose
    password is correct. Raises InvalidCredentials otherwise, without
    telling which part was wrong.
    """
    conditions = []
    if email:
        conditions.append(Member.email == email.strip().lower())
    if epf:
        conditions.append(Member.epf == epf)

    member = Member.query.filter(or_(*conditions)).first() if conditions else None

    if member is None or not member.check_password(password):
        logger.warning(f"Failed login attempt for {epf or email}")
        raise InvalidCredentials()

    logger.info(f"Member {member.id} logged in")
    return member


# ============================================================
# PROFILE
# ============================================================

def get_member(member_id, message='User not found'):
    member = db.session.get(Member, member_id)
    if member is None:
        raise NotFound(message)
    return member


def list_members():
    return Member.query.order_by(Member.created_at).all()


def update_member(member_id, fields, acting_member=None):
    """
    Apply a validated partial update to a member.

    Only admins may change roles or edit other members' profiles.
    """
    member = get_member(member_id, message='Member not found')

    if acting_member is not None and not acting_member.is_admin:
        if acting_member.id != member.id:
            raise Forbidden('Not authorized to update this member')
        if 'role' in fields and fields['role'] != member.role:
            raise Forbidden('Only admins can change member roles')

    try:
        if _find_duplicate(fields.get('email'), fields.get('epf'), fields.get('welfare_no'),
                           exclude_id=member.id):
            raise DuplicateError('Email, EPF or welfare number already in use')

        _apply_fields(member, dict(fields))
        db.session.commit()

        logger.info(f"Updated member {member.id}: {sorted(fields)}")
        return member

    except IntegrityError as e:
        db.session.rollback()
        if not _is_unique_violation(e):
            raise ValidationError('Member data violates a required field')
        raise DuplicateError('Email, EPF or welfare number already in use')
    except WelfareError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to update member: {str(e)}")


def delete_member(member_id):
    """Hard-delete a member. Their loans and scholarships are kept, detached."""
    member = get_member(member_id)
    try:
        db.session.delete(member)
        db.session.commit()
        logger.info(f"Deleted member {member_id}")
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to delete member: {str(e)}")
