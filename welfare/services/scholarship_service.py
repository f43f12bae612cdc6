"""
SCHOLARSHIP SERVICE
===================

Scholarships reference the member they were granted to.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from welfare.errors import NotFound, ServerError, WelfareError
from welfare.extensions import db
from welfare.models import Member, Scholarship

logger = logging.getLogger(__name__)


def create_scholarship(member_id, fields):
    """Record a scholarship for an existing member."""
    try:
        member = db.session.get(Member, member_id)
        if member is None:
            raise NotFound('Member not found')

        fields = dict(fields)
        fields.pop('member_id', None)
        fields.setdefault('epf_number', member.epf)

        scholarship = Scholarship(member_id=member.id, **fields)
        db.session.add(scholarship)
        db.session.commit()

        logger.info(f"Scholarship {scholarship.id} created for member {member.id}")
        return scholarship

    except WelfareError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to create scholarship: {str(e)}")


def list_scholarships():
    return Scholarship.query.order_by(Scholarship.created_at).all()


def list_scholarships_for_member(member_id):
    member = db.session.get(Member, member_id)
    if member is None:
        raise NotFound('Member not found')
    return member.scholarships


def get_scholarship(scholarship_id):
    scholarship = db.session.get(Scholarship, scholarship_id)
    if scholarship is None:
        raise NotFound('Scholarship not found')
    return scholarship


def delete_scholarship(scholarship_id):
    scholarship = get_scholarship(scholarship_id)
    try:
        db.session.delete(scholarship)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to delete scholarship: {str(e)}")
    logger.info(f"Deleted scholarship {scholarship_id}")
