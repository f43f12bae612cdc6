from unittest import mock

from welfare.extensions import db
from welfare.models import Member

from tests.helpers import PASSWORD, WelfareTestCase


def member_count(app):
    with app.app_context():
        return db.session.query(Member).count()


class RegisterMemberAPITest(WelfareTestCase):
    def test_register_member(self):
        data = self.member_payload(children=[{'name': 'Kasun', 'age': 9}], motherAge=61)
        response = self.client.post('/api/members', json=data)

        self.assertEqual(response.status_code, 201)
        body = response.get_json()['data']
        self.assertIn('token', body)
        self.assertEqual(body['user']['epf'], data['epf'])
        self.assertEqual(body['user']['welfareNo'], data['welfareNo'])
        self.assertEqual(body['user']['role'], 'member')
        self.assertEqual(body['user']['children'], [{'name': 'Kasun', 'age': 9}])
        self.assertEqual(body['user']['loans'], [])
        self.assertNotIn('password', body['user'])
        self.assertNotIn('passwordHash', body['user'])

        cookie = response.headers.get('Set-Cookie')
        self.assertTrue(cookie.startswith('jwt='))
        self.assertIn('HttpOnly', cookie)

    def test_only_admin_registers_admins(self):
        response = self.client.post('/api/members', json=self.member_payload(role='admin'))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(member_count(self.app), 0)

        admin = self.create_member(role='admin')
        response = self.client.post('/api/members', json=self.member_payload(role='admin'),
                                    headers=self.auth_headers(admin['epf']))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['data']['user']['role'], 'admin')

    def test_password_is_hashed(self):
        response = self.client.post('/api/members', json=self.member_payload())
        member_id = response.get_json()['data']['user']['_id']

        with self.app.app_context():
            member = db.session.get(Member, member_id)
            self.assertNotEqual(member.password_hash, PASSWORD)
            self.assertTrue(member.check_password(PASSWORD))

    def test_duplicate_email_rejected(self):
        existing = self.create_member()
        response = self.client.post('/api/members', json=self.member_payload(email=existing['email']))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'User already exists')
        self.assertEqual(member_count(self.app), 1)

    def test_duplicate_caught_by_unique_constraint(self):
        existing = self.create_member()
        with mock.patch('welfare.services.member_service._find_duplicate', return_value=None):
            response = self.client.post('/api/members',
                                        json=self.member_payload(email=existing['email']))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['message'], 'User already exists')
        self.assertEqual(member_count(self.app), 1)

    def test_duplicate_email_differs_only_in_case(self):
        existing = self.create_member()
        response = self.client.post('/api/members',
                                    json=self.member_payload(email=existing['email'].upper()))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(member_count(self.app), 1)

    def test_duplicate_epf_rejected(self):
        existing = self.create_member()
        response = self.client.post('/api/members', json=self.member_payload(epf=existing['epf']))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(member_count(self.app), 1)

    def test_duplicate_welfare_no_rejected(self):
        self.create_member(welfareNo='W-777')
        response = self.client.post('/api/members', json=self.member_payload(welfareNo='W-777'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(member_count(self.app), 1)

    def test_missing_fields_rejected(self):
        data = self.member_payload()
        del data['password']
        del data['welfareNo']
        response = self.client.post('/api/members', json=data)

        self.assertEqual(response.status_code, 400)
        fields = {error['field'] for error in response.get_json()['errors']}
        self.assertEqual(fields, {'password', 'welfareNo'})
        self.assertEqual(member_count(self.app), 0)

    def test_password_whitespace_is_kept(self):
        data = self.member_payload(epf='E555', password=' abc12 ')
        response = self.client.post('/api/members', json=data)
        self.assertEqual(response.status_code, 201)

        response = self.client.post('/api/members/auth', json={'epf': 'E555', 'password': ' abc12 '})
        self.assertEqual(response.status_code, 200)
        response = self.client.post('/api/members/auth', json={'epf': 'E555', 'password': 'abc12'})
        self.assertEqual(response.status_code, 401)

    def test_invalid_email_rejected(self):
        response = self.client.post('/api/members', json=self.member_payload(email='not-an-email'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(member_count(self.app), 0)


class AuthMemberAPITest(WelfareTestCase):
    def setUp(self):
        super().setUp()
        self.member = self.create_member(epf='E123', email='nimal@welfare.lk')

    def test_login_with_epf(self):
        response = self.client.post('/api/members/auth', json={'epf': 'E123', 'password': PASSWORD})

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['_id'], self.member['id'])
        self.assertEqual(body['epf'], 'E123')
        self.assertEqual(body['role'], 'member')
        self.assertIn('token', body)
        self.assertIn('name', body)

        cookie = response.headers.get('Set-Cookie')
        self.assertTrue(cookie.startswith(f"jwt={body['token']}"))
        self.assertIn('HttpOnly', cookie)

    def test_login_with_email(self):
        response = self.client.post('/api/members/auth',
                                    json={'email': 'Nimal@Welfare.lk', 'password': PASSWORD})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['_id'], self.member['id'])

    def test_wrong_password(self):
        response = self.client.post('/api/members/auth', json={'epf': 'E123', 'password': 'bad'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json(), {'message': 'Invalid EPF/ Email or Password!'})
        self.assertIsNone(response.headers.get('Set-Cookie'))

    def test_unknown_member(self):
        response = self.client.post('/api/members/auth', json={'epf': 'E999', 'password': PASSWORD})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['message'], 'Invalid EPF/ Email or Password!')

    def test_identifier_required(self):
        response = self.client.post('/api/members/auth', json={'password': PASSWORD})
        self.assertEqual(response.status_code, 400)

    def test_cookie_authenticates_later_requests(self):
        self.client.post('/api/members/auth', json={'epf': 'E123', 'password': PASSWORD})
        response = self.client.get(f"/api/members/{self.member['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['email'], 'nimal@welfare.lk')

    def test_logout_clears_cookie(self):
        self.client.post('/api/members/auth', json={'epf': 'E123', 'password': PASSWORD})
        response = self.client.post('/api/members/logout')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'message': 'User logged out'})
        cookie = response.headers.get('Set-Cookie')
        self.assertTrue(cookie.startswith('jwt=;'))
        self.assertIn('01 Jan 1970', cookie)

        response = self.client.get(f"/api/members/{self.member['id']}")
        self.assertEqual(response.status_code, 401)

    def test_request_without_token(self):
        response = self.client.get(f"/api/members/{self.member['id']}")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json(), {'message': 'Not authorized, no token'})

    def test_tampered_token(self):
        token = self.token_for('E123')
        response = self.client.get(f"/api/members/{self.member['id']}",
                                   headers={'Authorization': f'Bearer {token}x'})
        self.assertEqual(response.status_code, 401)


class MemberProfileAPITest(WelfareTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.create_member(role='admin')
        self.member = self.create_member()
        self.other = self.create_member()
        self.admin_headers = self.auth_headers(self.admin['epf'])
        self.member_headers = self.auth_headers(self.member['epf'])

    def test_get_profile(self):
        response = self.client.get(f"/api/members/{self.member['id']}", headers=self.member_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['epf'], self.member['epf'])

    def test_get_missing_profile(self):
        response = self.client.get('/api/members/9999', headers=self.member_headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['message'], 'User not found')

    def test_update_own_profile(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'contactNo': '0771234567', 'dateOfBirth': '1985-04-12'},
                                   headers=self.member_headers)
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['contactNo'], '0771234567')
        self.assertEqual(body['dateOfBirth'], '1985-04-12')
        self.assertEqual(self.fetch(Member, self.member['id'])['contactNo'], '0771234567')

    def test_update_password(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'password': 'another-secret'},
                                   headers=self.member_headers)
        self.assertEqual(response.status_code, 200)

        response = self.client.post('/api/members/auth',
                                    json={'epf': self.member['epf'], 'password': PASSWORD})
        self.assertEqual(response.status_code, 401)
        self.token_for(self.member['epf'], 'another-secret')

    def test_update_rejects_negative_age(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'fatherAge': -3}, headers=self.member_headers)
        self.assertEqual(response.status_code, 400)

    def test_update_duplicate_email(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'email': self.other['email']},
                                   headers=self.member_headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.fetch(Member, self.member['id'])['email'], self.member['email'])

    def test_update_rejects_null_required_field(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'name': None}, headers=self.member_headers)
        self.assertEqual(response.status_code, 400)
        errors = response.get_json()['errors']
        self.assertEqual([error['field'] for error in errors], ['name'])
        self.assertIn('cannot be null', errors[0]['message'])
        self.assertIsNotNone(self.fetch(Member, self.member['id'])['name'])

    def test_update_rejects_null_welfare_no(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'welfareNo': None}, headers=self.admin_headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['errors'][0]['field'], 'welfareNo')

    def test_member_cannot_update_someone_else(self):
        response = self.client.put(f"/api/members/{self.other['id']}",
                                   json={'name': 'Changed'}, headers=self.member_headers)
        self.assertEqual(response.status_code, 403)

    def test_member_cannot_promote_self(self):
        response = self.client.put(f"/api/members/{self.member['id']}",
                                   json={'role': 'admin'}, headers=self.member_headers)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.fetch(Member, self.member['id'])['role'], 'member')

    def test_admin_updates_any_member(self):
        response = self.client.put(f"/api/members/{self.other['id']}",
                                   json={'role': 'admin', 'branch': 'Kandy'},
                                   headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['role'], 'admin')
        self.assertEqual(response.get_json()['branch'], 'Kandy')

    def test_update_missing_member(self):
        response = self.client.put('/api/members/9999', json={'name': 'Ghost'},
                                   headers=self.admin_headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['message'], 'Member not found')

    def test_list_members_requires_admin(self):
        response = self.client.get('/api/members', headers=self.member_headers)
        self.assertEqual(response.status_code, 403)

        response = self.client.get('/api/members', headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.get_json()), 3)

    def test_delete_member(self):
        response = self.client.delete(f"/api/members/{self.other['id']}", headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'message': 'User deleted successfully'})
        self.assertIsNone(self.fetch(Member, self.other['id']))

    def test_delete_missing_member(self):
        response = self.client.delete('/api/members/9999', headers=self.admin_headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['message'], 'User not found')

    def test_member_cannot_delete(self):
        response = self.client.delete(f"/api/members/{self.other['id']}", headers=self.member_headers)
        self.assertEqual(response.status_code, 403)
        self.assertIsNotNone(self.fetch(Member, self.other['id']))
