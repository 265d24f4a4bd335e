import os
from datetime import timedelta
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import exceptions
from rest_framework.test import APIClient

from accounts.throttling import LoginRateThrottle
from .config import get_config
from .exceptions import BusinessRuleViolation, api_exception_handler


class ConfigTests(SimpleTestCase):
	def test_defaults(self):
		config = get_config()

		self.assertEqual(config.allowed_email_domains, ('geu.ac.in', 'gehu.ac.in'))
		self.assertEqual(config.session_cookie_name, 'token')
		self.assertEqual(config.session_lifetime, timedelta(days=30))
		self.assertEqual(config.reset_token_ttl, timedelta(minutes=10))
		self.assertEqual(config.points_per_passenger, 5)

	def test_settings_override_rebuilds_config(self):
		with override_settings(CAMPUS_EMAIL_DOMAINS=['uni.edu']):
			self.assertEqual(get_config().allowed_email_domains, ('uni.edu',))
		self.assertEqual(get_config().allowed_email_domains, ('geu.ac.in', 'gehu.ac.in'))


class ExceptionHandlerTests(SimpleTestCase):
	def test_service_error_uses_its_status_and_message(self):
		response = api_exception_handler(BusinessRuleViolation('No seats available for this ride'), {})

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data, {'success': False, 'message': 'No seats available for this ride'})

	def test_validation_errors_are_flattened(self):
		exc = exceptions.ValidationError({'email': ['Enter a valid email address.'], 'name': ['Required.']})
		response = api_exception_handler(exc, {})

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'Validation failed')
		self.assertEqual(
			response.data['errors'],
			[
				{'field': 'email', 'message': 'Enter a valid email address.'},
				{'field': 'name', 'message': 'Required.'},
			]
		)

	def test_unexpected_error_hides_detail(self):
		response = api_exception_handler(RuntimeError('boom'), {})

		self.assertEqual(response.status_code, 500)
		self.assertEqual(response.data, {'success': False, 'message': 'Server error'})


class ThrottleRateTests(SimpleTestCase):
	def test_multiplied_period_is_parsed(self):
		throttle = LoginRateThrottle()
		self.assertEqual(throttle.parse_rate('5/15m'), (5, 900))
		self.assertEqual(throttle.parse_rate('100/d'), (100, 86400))


class HealthCheckTests(TestCase):
	@patch.dict(os.environ, {"REDIS_URL": ""})
	def test_health_reports_database_and_cache(self):
		response = APIClient().get(reverse('health'))

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'healthy')
		self.assertEqual(response.data['services']['database'], 'healthy')
		self.assertEqual(response.data['services']['cache'], 'healthy')


class LoggingConfigTests(SimpleTestCase):
	def test_every_project_app_logs_at_info(self):
		from rideshare_backend.settings import base

		for app in ('accounts', 'rides', 'reputation', 'users', 'admin_panel', 'services', 'common'):
			self.assertEqual(base.LOGGING['loggers'][app]['level'], 'INFO', app)
			self.assertEqual(base.LOGGING['loggers'][app]['handlers'], ['console'], app)
