"""
LOAN ROUTES
===========

Uses loan_service for all operations.
Members apply and read; admins review, edit and delete.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from welfare.auth import admin_required
from welfare.schemas import LoanCreate, LoanStatusUpdate, LoanUpdate, parse_body
from welfare.services import loan_service

loans_bp = Blueprint('loans', __name__, url_prefix='/api/loans')


# ============== CREATE LOAN APPLICATION ==============
@loans_bp.route('', methods=['POST'])
@login_required
def create_loan():
    body = parse_body(LoanCreate, request.get_json(silent=True))
    loan = loan_service.create_loan(current_user.id, body.submitted())
    return jsonify({
        'message': 'Loan created and added to member successfully',
        'loan': loan.to_dict()
    }), 201


# ============== LOANS OF ONE MEMBER ==============
@loans_bp.route('/user/<int:user_id>', methods=['GET'])
@login_required
def list_member_loans(user_id):
    loans = loan_service.list_loans_for_member(user_id)
    return jsonify({
        'message': 'Loans retrieved successfully',
        'loans': [loan.to_dict() for loan in loans]
    }), 200


# ============== LIST ALL LOANS ==============
@loans_bp.route('', methods=['GET'])
@login_required
@admin_required
def list_loans():
    """List every loan, optionally filtered with ?status="""
    loans = loan_service.list_loans(status=request.args.get('status'))
    return jsonify([loan.to_dict() for loan in loans]), 200


# ============== VIEW LOAN ==============
@loans_bp.route('/<int:loan_id>', methods=['GET'])
@login_required
def view_loan(loan_id):
    loan = loan_service.get_loan(loan_id)
    return jsonify(loan.to_dict()), 200


# ============== APPROVE / REJECT ==============
@loans_bp.route('/<int:loan_id>/status', methods=['PUT'])
@login_required
@admin_required
def update_loan_status(loan_id):
    body = parse_body(LoanStatusUpdate, request.get_json(silent=True))
    loan = loan_service.update_loan_status(loan_id, body.loan_status)
    return jsonify({
        'message': 'Loan status updated successfully',
        'loan': loan.to_dict()
    }), 200


# ============== EDIT LOAN ==============
@loans_bp.route('/<int:loan_id>', methods=['PUT'])
@login_required
@admin_required
def update_loan(loan_id):
    body = parse_body(LoanUpdate, request.get_json(silent=True))
    loan = loan_service.update_loan(loan_id, body.submitted())
    return jsonify(loan.to_dict()), 200


# ============== DELETE LOAN ==============
@loans_bp.route('/<int:loan_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_loan(loan_id):
    loan_service.delete_loan(loan_id)
    return jsonify({'message': 'Loan application deleted successfully'}), 200
