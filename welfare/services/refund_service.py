"""
REFUND SERVICE
==============

Refund requests are plain records tied to a member by EPF number only.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from welfare.errors import NotFound, ServerError
from welfare.extensions import db
from welfare.models import Refund

logger = logging.getLogger(__name__)


def create_refund(fields):
    try:
        refund = Refund(**fields)
        db.session.add(refund)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to create refund: {str(e)}")

    logger.info(f"Refund {refund.id} created for epf {refund.epf}: amount={refund.amount}")
    return refund


def list_refunds():
    return Refund.query.order_by(Refund.created_at).all()


def list_refunds_for_epf(epf):
    return Refund.query.filter_by(epf=epf).order_by(Refund.created_at).all()


def get_refund(refund_id):
    refund = db.session.get(Refund, refund_id)
    if refund is None:
        raise NotFound('Refund not found')
    return refund


def delete_refund(refund_id):
    refund = get_refund(refund_id)
    try:
        db.session.delete(refund)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise ServerError(f"Failed to delete refund: {str(e)}")
    logger.info(f"Deleted refund {refund_id}")
