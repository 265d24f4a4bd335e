from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from accounts.tokens import issue_session_token
from reputation.models import Rating
from rides.models import PassengerRequest, Ride


def make_user(email, name='Student', **extra):
	return User.objects.create_user(
		email=email, password='Secret123', name=name, college_id=email.split('@')[0].upper(), **extra
	)


def make_ride(driver, days=1, **extra):
	return Ride.objects.create(
		driver=driver,
		start_location='GEU Main Gate',
		end_location='ISBT Dehradun',
		route='Clement Town',
		departure_time=timezone.now() + timedelta(days=days),
		total_seats=2,
		available_seats=2,
		**extra
	)


class AdminTestCase(TestCase):
	def setUp(self):
		self.admin = make_user('admin@geu.ac.in', 'Admin', role=User.Role.ADMIN)
		self.student = make_user('asha@geu.ac.in', 'Asha')
		self.client = APIClient()
		self.client.force_authenticate(user=self.admin)


class AdminAccessTests(AdminTestCase):
	def test_student_is_forbidden(self):
		client = APIClient()
		client.force_authenticate(user=self.student)

		response = client.get(reverse('admin_panel:stats'))
		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['message'], 'Access denied. Admin only.')

	def test_anonymous_is_unauthorized(self):
		response = APIClient().get(reverse('admin_panel:users'))
		self.assertEqual(response.status_code, 401)


class DashboardStatsTests(AdminTestCase):
	def test_stats_counts(self):
		make_ride(self.student)
		make_ride(self.student, status=Ride.Status.COMPLETED)

		response = self.client.get(reverse('admin_panel:stats'))

		self.assertEqual(response.status_code, 200)
		stats = response.data['stats']
		self.assertEqual(stats['totalUsers'], 1)
		self.assertEqual(stats['usersByRole'], {'admin': 1, 'student': 1})
		self.assertEqual(stats['totalRides'], 2)
		self.assertEqual(stats['completedRides'], 1)
		self.assertEqual(stats['scheduledRides'], 1)
		self.assertEqual(len(stats['recentUsers']), 2)
		self.assertEqual(len(stats['recentRides']), 2)
		self.assertEqual(stats['recentRides'][0]['driver']['name'], 'Asha')


class AdminUserTests(AdminTestCase):
	def test_user_list_is_paginated_and_searchable(self):
		for i in range(11):
			make_user(f'student{i}@gehu.ac.in', f'Student {i}')

		response = self.client.get(reverse('admin_panel:users'), {'page': 2, 'limit': 5})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data['users']), 5)
		self.assertEqual(response.data['pagination'], {'total': 13, 'page': 2, 'limit': 5, 'pages': 3})

		response = self.client.get(reverse('admin_panel:users'), {'search': 'STUDENT1'})
		# student1 and student10, by email or college ID
		self.assertEqual(response.data['pagination']['total'], 2)

	def test_invalid_pagination_falls_back_to_defaults(self):
		response = self.client.get(reverse('admin_panel:users'), {'page': 'abc', 'limit': -3})

		self.assertEqual(response.data['pagination']['page'], 1)
		self.assertEqual(response.data['pagination']['limit'], 10)

	def test_user_detail_lists_driven_and_joined_rides(self):
		other = make_user('ravi@geu.ac.in', 'Ravi')
		driven = make_ride(self.student, days=1)
		joined = make_ride(other, days=2)
		make_ride(other, days=3)
		PassengerRequest.objects.create(ride=joined, user=self.student, pickup_location='Gate')

		response = self.client.get(reverse('admin_panel:user-detail', kwargs={'user_id': self.student.id}))

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['email'], 'asha@geu.ac.in')
		self.assertEqual([r['id'] for r in response.data['rides']], [joined.id, driven.id])

	def test_unknown_user_is_not_found(self):
		response = self.client.get(reverse('admin_panel:user-detail', kwargs={'user_id': 9999}))
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['message'], 'User not found')

	def test_deactivation_locks_out_existing_token(self):
		token = issue_session_token(self.student)
		student_client = APIClient()
		student_client.cookies['token'] = token
		self.assertEqual(student_client.get(reverse('accounts:me')).status_code, 200)

		response = self.client.patch(
			reverse('admin_panel:user-status', kwargs={'user_id': self.student.id}),
			{'status': 'inactive'},
			format='json'
		)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['status'], 'inactive')
		self.assertEqual(student_client.get(reverse('accounts:me')).status_code, 401)

		self.client.patch(
			reverse('admin_panel:user-status', kwargs={'user_id': self.student.id}),
			{'status': 'active'},
			format='json'
		)
		self.assertEqual(student_client.get(reverse('accounts:me')).status_code, 200)

	def test_invalid_status_value(self):
		response = self.client.patch(
			reverse('admin_panel:user-status', kwargs={'user_id': self.student.id}),
			{'status': 'banned'},
			format='json'
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['errors'][0]['message'], 'Invalid status value')


class AdminRideTests(AdminTestCase):
	def test_ride_list_filters_by_status_and_inclusive_dates(self):
		first = make_ride(self.student, days=1)
		second = make_ride(self.student, days=2)
		make_ride(self.student, days=5)
		make_ride(self.student, days=2, status=Ride.Status.CANCELLED)

		response = self.client.get(reverse('admin_panel:rides'), {
			'status': 'scheduled',
			'startDate': timezone.localtime(first.departure_time).date().isoformat(),
			'endDate': timezone.localtime(second.departure_time).date().isoformat(),
		})

		self.assertEqual(response.status_code, 200)
		self.assertEqual([r['id'] for r in response.data['rides']], [second.id, first.id])
		self.assertEqual(response.data['pagination']['total'], 2)

	def test_ride_detail_and_delete(self):
		ride = make_ride(self.student)
		rider = make_user('ravi@geu.ac.in', 'Ravi')
		PassengerRequest.objects.create(ride=ride, user=rider, pickup_location='Gate')
		Rating.objects.create(ride=ride, rater=rider, ratee=self.student, rating=4)
		url = reverse('admin_panel:ride-detail', kwargs={'ride_id': ride.id})

		response = self.client.get(url)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data['ride']['passengers']), 1)

		response = self.client.delete(url)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Ride deleted successfully')
		self.assertFalse(Ride.objects.filter(pk=ride.pk).exists())
		self.assertFalse(PassengerRequest.objects.exists())
		self.assertFalse(Rating.objects.exists())
		self.assertTrue(User.objects.filter(pk=rider.pk).exists())

		self.assertEqual(self.client.delete(url).status_code, 404)
