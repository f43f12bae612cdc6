"""
REFUND ROUTES
=============
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from welfare.auth import admin_required
from welfare.schemas import RefundCreate, parse_body
from welfare.services import refund_service

refunds_bp = Blueprint('refunds', __name__, url_prefix='/api/refunds')


@refunds_bp.route('', methods=['POST'])
@login_required
def create_refund():
    body = parse_body(RefundCreate, request.get_json(silent=True))
    refund = refund_service.create_refund(body.submitted())
    return jsonify({
        'message': 'Refund request created successfully',
        'refund': refund.to_dict()
    }), 201


@refunds_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_refunds():
    refunds = refund_service.list_refunds()
    return jsonify([refund.to_dict() for refund in refunds]), 200


@refunds_bp.route('/epf/<epf>', methods=['GET'])
@login_required
def list_refunds_for_epf(epf):
    refunds = refund_service.list_refunds_for_epf(epf)
    return jsonify([refund.to_dict() for refund in refunds]), 200


@refunds_bp.route('/<int:refund_id>', methods=['GET'])
@login_required
def view_refund(refund_id):
    return jsonify(refund_service.get_refund(refund_id).to_dict()), 200


@refunds_bp.route('/<int:refund_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_refund(refund_id):
    refund_service.delete_refund(refund_id)
    return jsonify({'message': 'Refund deleted successfully'}), 200
