from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from rides.models import PassengerRequest, Ride


def make_user(email, name='Student', **extra):
	return User.objects.create_user(
		email=email, password='Secret123', name=name, college_id=email.split('@')[0], **extra
	)


def make_ride(driver, days=1, **extra):
	return Ride.objects.create(
		driver=driver,
		start_location=extra.pop('start_location', 'GEU Main Gate'),
		end_location=extra.pop('end_location', 'ISBT Dehradun'),
		route='Clement Town',
		departure_time=timezone.now() + timedelta(days=days),
		total_seats=3,
		available_seats=3,
		**extra
	)


class UserProfileTests(TestCase):
	def setUp(self):
		self.user = make_user('asha@geu.ac.in', 'Asha')
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)
		self.url = reverse('users:me')

	def test_get_profile_hides_credentials(self):
		response = self.client.get(self.url)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['name'], 'Asha')
		self.assertEqual(response.data['user']['collegeID'], 'asha')
		self.assertNotIn('password', response.data['user'])

	def test_update_profile_fields(self):
		response = self.client.put(self.url, {
			'name': '  Asha R  ',
			'phoneNumber': '+919876543210',
			'profilePicture': 'https://cdn.example.com/asha.png',
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.user.refresh_from_db()
		self.assertEqual(self.user.name, 'Asha R')
		self.assertEqual(self.user.phone_number, '+919876543210')
		self.assertEqual(response.data['user']['profilePicture'], 'https://cdn.example.com/asha.png')

	def test_blank_name_only_is_not_a_valid_update(self):
		response = self.client.put(self.url, {'name': '   ', 'role': 'admin'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'No valid fields to update')
		self.user.refresh_from_db()
		self.assertEqual(self.user.name, 'Asha')
		self.assertEqual(self.user.role, 'student')

	def test_invalid_phone_number_is_rejected(self):
		response = self.client.put(self.url, {'phoneNumber': '12ab'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['errors'][0]['field'], 'phoneNumber')

	def test_phone_number_of_another_account_conflicts(self):
		make_user('other@geu.ac.in', phone_number='+919876543210')
		response = self.client.put(self.url, {'phoneNumber': '+919876543210'}, format='json')

		self.assertEqual(response.status_code, 409)
		self.user.refresh_from_db()
		self.assertEqual(self.user.phone_number, '')


class UserRidesAndStatsTests(TestCase):
	def setUp(self):
		self.user = make_user('asha@geu.ac.in', 'Asha')
		self.other = make_user('ravi@geu.ac.in', 'Ravi')
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)

		self.driven = make_ride(self.user, days=1)
		self.joined = make_ride(self.other, days=3)
		self.pending = make_ride(self.other, days=2)
		make_ride(self.other, days=4)

		PassengerRequest.objects.create(
			ride=self.joined, user=self.user, pickup_location='Gate',
			status=PassengerRequest.Status.COMPLETED, has_rated=True
		)
		PassengerRequest.objects.create(ride=self.pending, user=self.user, pickup_location='Gate')

	def test_my_rides_newest_departure_first_with_role_flags(self):
		response = self.client.get(reverse('users:rides'))

		self.assertEqual(response.status_code, 200)
		rides = response.data['rides']
		self.assertEqual([r['id'] for r in rides], [self.joined.id, self.pending.id, self.driven.id])
		self.assertFalse(rides[0]['isDriver'])
		self.assertTrue(rides[0]['hasRated'])
		self.assertFalse(rides[1]['hasRated'])
		self.assertTrue(rides[2]['isDriver'])

	def test_stats_count_offered_and_joined_rides(self):
		response = self.client.get(reverse('users:stats'))

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['stats']['offeredRides'], 1)
		# Pending requests do not count as joined
		self.assertEqual(response.data['stats']['joinedRides'], 1)
		self.assertEqual(response.data['stats']['totalRides'], 2)


class UserNotificationsTests(TestCase):
	def setUp(self):
		self.driver = make_user('asha@geu.ac.in', 'Asha')
		self.client = APIClient()
		self.client.force_authenticate(user=self.driver)
		self.riders = [make_user(f'r{i}@geu.ac.in') for i in range(3)]

	def test_one_notification_per_ride_with_pending_requests(self):
		ride = make_ride(self.driver, start_location='Gate', end_location='ISBT')
		quiet = make_ride(self.driver, days=2)
		cancelled = make_ride(self.driver, days=3, status=Ride.Status.CANCELLED)

		for rider in self.riders[:2]:
			PassengerRequest.objects.create(ride=ride, user=rider, pickup_location='Gate')
		PassengerRequest.objects.create(
			ride=quiet, user=self.riders[0], pickup_location='Gate', status=PassengerRequest.Status.ACCEPTED
		)
		PassengerRequest.objects.create(ride=cancelled, user=self.riders[2], pickup_location='Gate')

		response = self.client.get(reverse('users:notifications'))

		self.assertEqual(response.status_code, 200)
		notifications = response.data['notifications']
		self.assertEqual(len(notifications), 1)
		note = notifications[0]
		self.assertEqual(note['id'], f'ride-{ride.id}-requests')
		self.assertEqual(note['rideId'], ride.id)
		self.assertEqual(note['title'], '2 Pending Requests')
		self.assertTrue(note['message'].startswith('You have 2 pending requests for your ride from Gate to ISBT on '))
		self.assertFalse(note['read'])
		self.assertEqual(note['type'], 'ride-request')
		self.assertIsNotNone(note['timestamp'])

	def test_single_pending_request_title(self):
		ride = make_ride(self.driver)
		PassengerRequest.objects.create(ride=ride, user=self.riders[0], pickup_location='Gate')

		response = self.client.get(reverse('users:notifications'))
		self.assertEqual(response.data['notifications'][0]['title'], '1 Pending Request')


class UserProfileRatingsTests(TestCase):
	def setUp(self):
		self.driver = make_user('asha@geu.ac.in', 'Asha')
		self.rider = make_user('ravi@geu.ac.in', 'Ravi')
		self.ride = make_ride(self.driver, status=Ride.Status.COMPLETED)
		PassengerRequest.objects.create(
			ride=self.ride, user=self.rider, pickup_location='Gate',
			status=PassengerRequest.Status.COMPLETED
		)

	def test_submitted_rating_appears_on_driver_profile(self):
		rider_client = APIClient()
		rider_client.force_authenticate(user=self.rider)
		response = rider_client.post(
			reverse('rides:rate-ride', kwargs={'ride_id': self.ride.id}),
			{'rating': 4, 'comment': 'On time'},
			format='json'
		)
		self.assertEqual(response.status_code, 200)

		self.driver.refresh_from_db()
		driver_client = APIClient()
		driver_client.force_authenticate(user=self.driver)
		response = driver_client.get(reverse('users:me'))

		self.assertEqual(response.status_code, 200)
		ratings = response.data['user']['ratings']
		self.assertEqual(len(ratings), 1)
		self.assertEqual(ratings[0]['rating'], 4)
		self.assertEqual(ratings[0]['comment'], 'On time')
		self.assertEqual(ratings[0]['rater'], {'id': self.rider.id, 'name': 'Ravi'})
		self.assertIsNotNone(ratings[0]['createdAt'])
		self.assertEqual(response.data['user']['averageRating'], 4.0)

	def test_profile_without_ratings_has_empty_list(self):
		client = APIClient()
		client.force_authenticate(user=self.rider)

		response = client.get(reverse('users:me'))
		self.assertEqual(response.data['user']['ratings'], [])
