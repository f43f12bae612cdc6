"""
MEMBER ROUTES
=============

Registration, login/logout and profile management.
"""

from flask import Blueprint, jsonify, make_response, request
from flask_login import current_user, login_required

from welfare.auth import admin_required, clear_auth_cookie, generate_token, set_auth_cookie
from welfare.errors import Forbidden
from welfare.models import MemberRole
from welfare.schemas import LoginRequest, MemberCreate, MemberUpdate, parse_body
from welfare.services import member_service

members_bp = Blueprint('members', __name__, url_prefix='/api/members')


# ============== LOGIN ==============
@members_bp.route('/auth', methods=['POST'])
def auth_member():
    body = parse_body(LoginRequest, request.get_json(silent=True))
    member = member_service.authenticate(body.password, epf=body.epf, email=body.email)

    token = generate_token(member.id)
    payload = member.summary()
    payload['token'] = token

    response = make_response(jsonify(payload), 200)
    return set_auth_cookie(response, token)


# ============== REGISTER ==============
@members_bp.route('', methods=['POST'])
def register_member():
    body = parse_body(MemberCreate, request.get_json(silent=True))
    if body.role == MemberRole.ADMIN.value and not (current_user.is_authenticated and current_user.is_admin):
        raise Forbidden('Only admins can register admin members')
    member = member_service.register_member(body.submitted())

    token = generate_token(member.id)
    response = make_response(jsonify({'data': {'token': token, 'user': member.to_dict()}}), 201)
    # An admin registering someone else keeps their own session
    if not current_user.is_authenticated:
        set_auth_cookie(response, token)
    return response


# ============== LOGOUT ==============
@members_bp.route('/logout', methods=['POST'])
def logout_member():
    response = make_response(jsonify({'message': 'User logged out'}), 200)
    return clear_auth_cookie(response)


# ============== LIST ALL MEMBERS ==============
@members_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_members():
    members = member_service.list_members()
    return jsonify([member.to_dict() for member in members]), 200


# ============== VIEW PROFILE ==============
@members_bp.route('/<int:member_id>', methods=['GET'])
@login_required
def get_member_profile(member_id):
    member = member_service.get_member(member_id)
    return jsonify(member.to_dict()), 200


# ============== UPDATE PROFILE ==============
@members_bp.route('/<int:member_id>', methods=['PUT'])
@login_required
def update_member_profile(member_id):
    body = parse_body(MemberUpdate, request.get_json(silent=True))
    member = member_service.update_member(member_id, body.submitted(), acting_member=current_user)
    return jsonify(member.to_dict()), 200


# ============== DELETE MEMBER ==============
@members_bp.route('/<int:member_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_member(member_id):
    member_service.delete_member(member_id)
    return jsonify({'message': 'User deleted successfully'}), 200
