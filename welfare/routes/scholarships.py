"""
SCHOLARSHIP ROUTES
==================

Members record scholarships for themselves; admins may record one
for any member by passing memberId.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from welfare.auth import admin_required
from welfare.schemas import ScholarshipCreate, parse_body
from welfare.services import scholarship_service

scholarships_bp = Blueprint('scholarships', __name__, url_prefix='/api/scholarships')


@scholarships_bp.route('', methods=['POST'])
@login_required
def create_scholarship():
    body = parse_body(ScholarshipCreate, request.get_json(silent=True))

    member_id = current_user.id
    if current_user.is_admin and body.member_id is not None:
        member_id = body.member_id

    scholarship = scholarship_service.create_scholarship(member_id, body.submitted())
    return jsonify({
        'message': 'Scholarship created successfully',
        'scholarship': scholarship.to_dict()
    }), 201


@scholarships_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_scholarships():
    scholarships = scholarship_service.list_scholarships()
    return jsonify([s.to_dict() for s in scholarships]), 200


@scholarships_bp.route('/user/<int:user_id>', methods=['GET'])
@login_required
def list_member_scholarships(user_id):
    scholarships = scholarship_service.list_scholarships_for_member(user_id)
    return jsonify([s.to_dict() for s in scholarships]), 200


@scholarships_bp.route('/<int:scholarship_id>', methods=['GET'])
@login_required
def view_scholarship(scholarship_id):
    return jsonify(scholarship_service.get_scholarship(scholarship_id).to_dict()), 200


@scholarships_bp.route('/<int:scholarship_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_scholarship(scholarship_id):
    scholarship_service.delete_scholarship(scholarship_id)
    return jsonify({'message': 'Scholarship deleted successfully'}), 200
