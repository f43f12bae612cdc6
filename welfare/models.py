import re
from datetime import datetime
from enum import Enum

from flask_login import UserMixin
from sqlalchemy.orm import validates
from werkzeug.security import generate_password_hash, check_password_hash

from welfare.extensions import db

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _isoformat(value):
    return value.isoformat() if value else None


# ============================================================
# ENUMS
# ============================================================
class MemberRole(Enum):
    MEMBER = 'member'
    ADMIN = 'admin'


class LoanStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    @classmethod
    def values(cls):
        return [status.value for status in cls]


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow,
                           onupdate=datetime.utcnow, nullable=False)


# ============================================================
# MEMBER MODEL
# ============================================================
class Member(UserMixin, TimestampMixin, db.Model):
    """
    A registered member of the welfare fund.
    Members log in with their email or EPF number and may hold
    any number of loans and scholarships.
    """
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    epf = db.Column(db.String(40), unique=True, nullable=False)
    welfare_no = db.Column(db.String(40), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), default=MemberRole.MEMBER.value, nullable=False)

    date_of_joined = db.Column(db.Date)
    date_of_birth = db.Column(db.Date)
    date_of_registered = db.Column(db.Date)

    # Employment details
    payroll = db.Column(db.String(80))
    division = db.Column(db.String(80))
    branch = db.Column(db.String(80))
    unit = db.Column(db.String(80))
    contact_no = db.Column(db.String(30))

    # Family details
    spouse_name = db.Column(db.String(120))
    children = db.Column(db.JSON, default=list)
    mother_name = db.Column(db.String(120))
    mother_age = db.Column(db.Integer)
    father_name = db.Column(db.String(120))
    father_age = db.Column(db.Integer)
    mother_in_law_name = db.Column(db.String(120))
    mother_in_law_age = db.Column(db.Integer)
    father_in_law_name = db.Column(db.String(120))
    father_in_law_age = db.Column(db.Integer)

    member_fee = db.Column(db.Float)

    # Deleting a member nulls loans.member_id instead of removing the loans
    loans = db.relationship('Loan', backref='member', lazy='select',
                            order_by='Loan.created_at')
    scholarships = db.relationship('Scholarship', backref='member', lazy='select')

    def set_password(self, password):
        """Hash and set the member's password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against stored hash."""
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == MemberRole.ADMIN.value

    @validates('email')
    def validate_email(self, key, value):
        value = (value or '').strip().lower()
        if not EMAIL_RE.match(value):
            raise ValueError('Please enter a valid email address')
        return value

    @validates('role')
    def validate_role(self, key, value):
        allowed = [role.value for role in MemberRole]
        if value not in allowed:
            raise ValueError(f"Role must be one of: {', '.join(allowed)}")
        return value

    @validates('mother_age', 'father_age', 'mother_in_law_age', 'father_in_law_age', 'member_fee')
    def validate_non_negative(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f'{key} cannot be negative')
        return value

    def summary(self):
        """Fields returned on login."""
        return {
            '_id': self.id,
            'name': self.name,
            'epf': self.epf,
            'role': self.role,
        }

    def to_dict(self):
        return {
            '_id': self.id,
            'name': self.name,
            'email': self.email,
            'epf': self.epf,
            'welfareNo': self.welfare_no,
            'role': self.role,
            'dateOfJoined': _isoformat(self.date_of_joined),
            'dateOfBirth': _isoformat(self.date_of_birth),
            'dateOfRegistered': _isoformat(self.date_of_registered),
            'payroll': self.payroll,
            'division': self.division,
            'branch': self.branch,
            'unit': self.unit,
            'contactNo': self.contact_no,
            'spouseName': self.spouse_name,
            'children': self.children or [],
            'motherName': self.mother_name,
            'motherAge': self.mother_age,
            'fatherName': self.father_name,
            'fatherAge': self.father_age,
            'motherInLawName': self.mother_in_law_name,
            'motherInLawAge': self.mother_in_law_age,
            'fatherInLawName': self.father_in_law_name,
            'fatherInLawAge': self.father_in_law_age,
            'memberFee': self.member_fee,
            'loans': [loan.id for loan in self.loans],
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Member {self.epf} {self.name}>'


# ============================================================
# LOAN MODEL
# ============================================================
class Loan(TimestampMixin, db.Model):
    """
    A loan application made by a member.

    Lifecycle:
    1. Created with loan_status='pending'
    2. An admin sets it to 'approved' or 'rejected'
    3. Any status may be set again later; there is no terminal state
    """
    __tablename__ = 'loans'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True, index=True)
    loan_status = db.Column(db.String(20), default=LoanStatus.PENDING.value, nullable=False)

    amount = db.Column(db.Float, nullable=False)
    loan_type = db.Column(db.String(80))
    reason = db.Column(db.String(500))
    repayment_period = db.Column(db.Integer)  # months

    @validates('loan_status')
    def validate_loan_status(self, key, value):
        if value not in LoanStatus.values():
            raise ValueError('Invalid loan status')
        return value

    @validates('amount')
    def validate_amount(self, key, value):
        if value is None or value <= 0:
            raise ValueError('Loan amount must be greater than 0')
        return value

    def to_dict(self):
        return {
            '_id': self.id,
            'memberId': self.member_id,
            'loanStatus': self.loan_status,
            'amount': self.amount,
            'loanType': self.loan_type,
            'reason': self.reason,
            'repaymentPeriod': self.repayment_period,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Loan {self.amount} member={self.member_id} status={self.loan_status}>'


# ============================================================
# REFUND MODEL
# ============================================================
class Refund(TimestampMixin, db.Model):
    """
    A refund request. Linked to a member only through the EPF
    number; no foreign key is enforced.
    """
    __tablename__ = 'refunds'

    id = db.Column(db.Integer, primary_key=True)
    benefit = db.Column(db.String(120), nullable=False)
    epf = db.Column(db.String(40), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    reason = db.Column(db.String(500))
    message = db.Column(db.String(500))

    def to_dict(self):
        return {
            '_id': self.id,
            'benefit': self.benefit,
            'epf': self.epf,
            'amount': self.amount,
            'reason': self.reason,
            'message': self.message,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Refund {self.benefit} epf={self.epf} amount={self.amount}>'


# ============================================================
# SCHOLARSHIP MODEL
# ============================================================
class Scholarship(TimestampMixin, db.Model):
    """A scholarship granted for a member's child."""
    __tablename__ = 'scholarships'

    id = db.Column(db.Integer, primary_key=True)
    benefit = db.Column(db.String(120), nullable=False)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True, index=True)
    epf_number = db.Column(db.String(40))
    index_number = db.Column(db.String(40))
    amount = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            '_id': self.id,
            'benefit': self.benefit,
            'memberId': self.member_id,
            'epfNumber': self.epf_number,
            'indexNumber': self.index_number,
            'amount': self.amount,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<Scholarship {self.benefit} member={self.member_id} amount={self.amount}>'
