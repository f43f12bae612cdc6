import unittest

from config import TestingConfig
from welfare import create_app
from welfare.extensions import db
from welfare.services import member_service

PASSWORD = 'secret123'


class WelfareTestCase(unittest.TestCase):
    """Builds a fresh app on an in-memory database for every test."""

    def setUp(self):
        self.app = create_app(TestingConfig)
        self.client = self.app.test_client()
        self._counter = 0

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def member_payload(self, **overrides):
        self._counter += 1
        n = self._counter
        payload = {
            'name': f'Member {n}',
            'email': f'member{n}@welfare.lk',
            'password': PASSWORD,
            'epf': f'E{100 + n}',
            'welfareNo': f'W{100 + n}',
            'division': 'Distribution',
            'branch': 'Colombo',
        }
        payload.update(overrides)
        return payload

    def create_member(self, role='member', **overrides):
        """Insert a member directly and return its id, epf and email."""
        payload = self.member_payload(**overrides)
        fields = {
            'name': payload['name'],
            'email': payload['email'],
            'password': payload['password'],
            'epf': payload['epf'],
            'welfare_no': payload['welfareNo'],
            'role': role,
        }
        with self.app.app_context():
            member = member_service.register_member(fields)
            return {'id': member.id, 'epf': member.epf, 'email': member.email}

    def token_for(self, epf, password=PASSWORD):
        response = self.app.test_client().post(
            '/api/members/auth', json={'epf': epf, 'password': password})
        self.assertEqual(response.status_code, 200, response.get_json())
        return response.get_json()['token']

    def auth_headers(self, epf, password=PASSWORD):
        return {'Authorization': f'Bearer {self.token_for(epf, password)}'}

    def fetch(self, model, record_id):
        """Load a record in a fresh session."""
        with self.app.app_context():
            record = db.session.get(model, record_id)
            return record.to_dict() if record else None
