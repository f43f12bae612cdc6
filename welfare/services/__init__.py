"""
Services Package
================

Business logic layer for the welfare fund.

Routes call these services; they never manipulate models directly.
"""

from welfare.services.member_service import (
    register_member,
    authenticate,
    get_member,
    list_members,
    update_member,
    delete_member
)

from welfare.services.loan_service import (
    create_loan,
    list_loans_for_member,
    list_loans,
    get_loan,
    update_loan_status,
    update_loan,
    delete_loan
)

from welfare.services.refund_service import (
    create_refund,
    list_refunds,
    list_refunds_for_epf,
    get_refund,
    delete_refund
)

from welfare.services.scholarship_service import (
    create_scholarship,
    list_scholarships,
    list_scholarships_for_member,
    get_scholarship,
    delete_scholarship
)
