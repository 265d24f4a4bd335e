import re
from datetime import timedelta
from io import StringIO

from django.core import mail
from django.core.cache import cache
from django.core.management import CommandError, call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient
from unittest.mock import patch

from .models import User
from .services import hash_reset_token
from .tokens import issue_session_token

PASSWORD = 'Secret123'
RESET_LINK = re.compile(r'/reset-password/([0-9a-f]{40})')


def make_user(email='asha@geu.ac.in', password=PASSWORD, **extra):
	extra.setdefault('name', 'Asha Rawat')
	extra.setdefault('college_id', 'GEU001')
	return User.objects.create_user(email=email, password=password, **extra)


class RegistrationTests(TestCase):
	def setUp(self):
		cache.clear()
		self.client = APIClient()
		self.url = reverse('accounts:register')
		self.payload = {
			'name': 'Asha Rawat',
			'email': 'Asha@GEU.ac.in',
			'password': PASSWORD,
			'collegeID': 'GEU001',
			'phoneNumber': '+919876543210',
		}

	def test_register_creates_student_and_sets_session_cookie(self):
		response = self.client.post(self.url, self.payload, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertTrue(response.data['success'])
		self.assertEqual(response.data['user']['email'], 'asha@geu.ac.in')
		self.assertEqual(response.data['user']['role'], 'student')
		self.assertEqual(response.data['user']['points'], 0)
		self.assertTrue(response.data['token'])
		self.assertEqual(response.cookies['token'].value, response.data['token'])
		self.assertTrue(response.cookies['token']['httponly'])

		user = User.objects.get(email='asha@geu.ac.in')
		self.assertNotEqual(user.password, PASSWORD)
		self.assertTrue(user.check_password(PASSWORD))
		self.assertEqual(user.status, User.Status.ACTIVE)

	def test_register_rejects_email_outside_campus_domains(self):
		self.payload['email'] = 'asha@gmail.com'
		response = self.client.post(self.url, self.payload, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(response.data['success'])
		self.assertEqual(response.data['errors'][0]['field'], 'email')
		self.assertEqual(
			response.data['errors'][0]['message'],
			'Email must be from geu.ac.in or gehu.ac.in domain'
		)
		self.assertFalse(User.objects.exists())

	def test_register_rejects_weak_password(self):
		self.payload['password'] = 'secret'
		response = self.client.post(self.url, self.payload, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['errors'][0]['field'], 'password')

	def test_register_duplicate_email_conflicts(self):
		make_user()
		response = self.client.post(self.url, self.payload, format='json')

		self.assertEqual(response.status_code, 409)
		self.assertTrue(response.data['suggestLogin'])
		self.assertEqual(response.data['duplicateType'], 'email')
		self.assertEqual(User.objects.count(), 1)

	def test_register_duplicate_phone_conflicts(self):
		make_user(email='other@gehu.ac.in', phone_number='+919876543210')
		response = self.client.post(self.url, self.payload, format='json')

		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['duplicateType'], 'phone number')

	def test_register_keeps_surrounding_whitespace_in_password(self):
		self.payload['password'] = ' Secret123 '
		response = self.client.post(self.url, self.payload, format='json')
		self.assertEqual(response.status_code, 201)

		user = User.objects.get(email='asha@geu.ac.in')
		self.assertTrue(user.check_password(' Secret123 '))
		self.assertFalse(user.check_password('Secret123'))

		login = self.client.post(
			reverse('accounts:login'),
			{'email': 'asha@geu.ac.in', 'password': ' Secret123 '},
			format='json'
		)
		self.assertEqual(login.status_code, 200)

	def test_many_sign_ups_from_one_address_are_accepted(self):
		for i in range(8):
			self.payload.update({
				'email': f'student{i}@geu.ac.in',
				'collegeID': f'GEU10{i}',
				'phoneNumber': f'+91987654321{i}',
			})
			response = self.client.post(self.url, self.payload, format='json')
			self.assertEqual(response.status_code, 201)

		self.assertEqual(User.objects.count(), 8)


class LoginTests(TestCase):
	def setUp(self):
		cache.clear()
		self.client = APIClient()
		self.user = make_user()
		self.url = reverse('accounts:login')

	def test_login_success_sets_cookie_and_authenticates_me(self):
		response = self.client.post(self.url, {'email': 'ASHA@geu.ac.in', 'password': PASSWORD}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['id'], self.user.id)

		me = self.client.get(reverse('accounts:me'))
		self.assertEqual(me.status_code, 200)
		self.assertEqual(me.data['user']['email'], 'asha@geu.ac.in')
		self.assertNotIn('password', me.data['user'])
		self.assertNotIn('reset_password_token', me.data['user'])

	def test_login_wrong_password_is_unauthorized(self):
		response = self.client.post(self.url, {'email': 'asha@geu.ac.in', 'password': 'Wrong123'}, format='json')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['message'], 'Invalid credentials')
		self.assertNotIn('token', response.cookies)

	def test_login_inactive_user_is_refused(self):
		self.user.status = User.Status.INACTIVE
		self.user.save(update_fields=['status'])

		response = self.client.post(self.url, {'email': 'asha@geu.ac.in', 'password': PASSWORD}, format='json')
		self.assertEqual(response.status_code, 401)

	def test_login_is_throttled_after_five_attempts(self):
		for _ in range(5):
			response = self.client.post(self.url, {'email': 'asha@geu.ac.in', 'password': 'Wrong123'}, format='json')
			self.assertEqual(response.status_code, 401)

		# Correct credentials are still refused once the window is used up
		response = self.client.post(self.url, {'email': 'asha@geu.ac.in', 'password': PASSWORD}, format='json')
		self.assertEqual(response.status_code, 429)
		self.assertEqual(
			response.data['message'],
			'Too many login attempts. Please try again after 15 minutes.'
		)


class SessionGateTests(TestCase):
	def setUp(self):
		cache.clear()
		self.client = APIClient()
		self.user = make_user()
		self.me_url = reverse('accounts:me')

	def test_missing_token_is_unauthorized(self):
		response = self.client.get(self.me_url)
		self.assertEqual(response.status_code, 401)
		self.assertFalse(response.data['success'])

	def test_bearer_header_is_accepted(self):
		token = issue_session_token(self.user)
		self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

		response = self.client.get(self.me_url)
		self.assertEqual(response.status_code, 200)

	def test_malformed_token_is_unauthorized(self):
		self.client.cookies['token'] = 'not-a-session-token'

		response = self.client.get(self.me_url)
		self.assertEqual(response.status_code, 401)

	def test_deactivated_user_token_is_refused(self):
		token = issue_session_token(self.user)
		self.user.status = User.Status.INACTIVE
		self.user.save(update_fields=['status'])
		self.client.cookies['token'] = token

		response = self.client.get(self.me_url)
		self.assertEqual(response.status_code, 401)

	def test_logout_replaces_cookie_with_placeholder(self):
		self.client.post(reverse('accounts:login'), {'email': 'asha@geu.ac.in', 'password': PASSWORD}, format='json')
		self.assertEqual(self.client.get(self.me_url).status_code, 200)

		response = self.client.get(reverse('accounts:logout'))
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Logged out successfully')
		self.assertEqual(response.cookies['token'].value, 'none')
		self.assertEqual(response.cookies['token']['max-age'], 10)

		self.assertEqual(self.client.get(self.me_url).status_code, 401)


class PasswordResetTests(TestCase):
	def setUp(self):
		cache.clear()
		self.client = APIClient()
		self.user = make_user()
		self.forgot_url = reverse('accounts:forgot-password')

	def _request_reset(self):
		response = self.client.post(self.forgot_url, {'email': 'asha@geu.ac.in'}, format='json')
		self.assertEqual(response.status_code, 200)
		return RESET_LINK.search(mail.outbox[-1].body).group(1)

	def test_forgot_password_stores_only_token_digest(self):
		raw_token = self._request_reset()

		self.user.refresh_from_db()
		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].to, ['asha@geu.ac.in'])
		self.assertNotEqual(self.user.reset_password_token, raw_token)
		self.assertEqual(self.user.reset_password_token, hash_reset_token(raw_token))
		self.assertGreater(self.user.reset_password_expire, timezone.now())

	def test_forgot_password_unknown_email_is_not_found(self):
		response = self.client.post(self.forgot_url, {'email': 'ghost@geu.ac.in'}, format='json')
		self.assertEqual(response.status_code, 404)
		self.assertEqual(len(mail.outbox), 0)

	@patch('accounts.services.send_mail', side_effect=ConnectionRefusedError('smtp down'))
	def test_email_failure_clears_reset_token(self, mock_send):
		response = self.client.post(self.forgot_url, {'email': 'asha@geu.ac.in'}, format='json')

		self.assertEqual(response.status_code, 500)
		self.assertEqual(response.data['message'], 'Email could not be sent')
		mock_send.assert_called_once()

		self.user.refresh_from_db()
		self.assertEqual(self.user.reset_password_token, '')
		self.assertIsNone(self.user.reset_password_expire)

	def test_reset_password_rotates_password_and_is_single_use(self):
		raw_token = self._request_reset()
		url = reverse('accounts:reset-password', kwargs={'token': raw_token})

		response = self.client.put(url, {'password': 'NewSecret1'}, format='json')
		self.assertEqual(response.status_code, 200)
		self.assertIn('token', response.cookies)

		self.user.refresh_from_db()
		self.assertTrue(self.user.check_password('NewSecret1'))
		self.assertEqual(self.user.reset_password_token, '')

		again = self.client.put(url, {'password': 'Another1'}, format='json')
		self.assertEqual(again.status_code, 400)
		self.assertEqual(again.data['message'], 'Invalid or expired reset token')

	def test_expired_reset_token_is_rejected(self):
		raw_token = self._request_reset()
		User.objects.filter(pk=self.user.pk).update(reset_password_expire=timezone.now() - timedelta(seconds=1))

		response = self.client.put(
			reverse('accounts:reset-password', kwargs={'token': raw_token}),
			{'password': 'NewSecret1'},
			format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.user.refresh_from_db()
		self.assertTrue(self.user.check_password(PASSWORD))

	def test_reset_password_keeps_surrounding_whitespace(self):
		raw_token = self._request_reset()

		response = self.client.put(
			reverse('accounts:reset-password', kwargs={'token': raw_token}),
			{'password': 'NewSecret1 '},
			format='json'
		)
		self.assertEqual(response.status_code, 200)

		self.user.refresh_from_db()
		self.assertTrue(self.user.check_password('NewSecret1 '))
		self.assertFalse(self.user.check_password('NewSecret1'))


class SetRoleCommandTests(TestCase):
	def test_set_role_promotes_user_to_admin(self):
		user = make_user()
		out = StringIO()

		call_command('set_role', 'ASHA@geu.ac.in', 'admin', stdout=out)

		user.refresh_from_db()
		self.assertEqual(user.role, User.Role.ADMIN)
		self.assertIn('is now admin', out.getvalue())

	def test_set_role_unknown_email_fails(self):
		with self.assertRaises(CommandError):
			call_command('set_role', 'ghost@geu.ac.in', 'admin')
