from datetime import timedelta

from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import F
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient, APIRequestFactory, force_authenticate

from accounts.models import User
from reputation.models import Rating
from services.ride_management import ride_lifecycle
from services.ride_management.exceptions import InvalidTransitionError, NoSeatsAvailableError
from .models import PassengerRequest, Ride
from .views import (
	complete_ride,
	join_ride,
	rate_ride,
	rides,
	start_ride,
	update_passenger_status,
)


def make_user(email, name='Student'):
	return User.objects.create_user(email=email, password='Secret123', name=name, college_id=email.split('@')[0])


def make_ride(driver, seats=2, **extra):
	extra.setdefault('departure_time', timezone.now() + timedelta(days=1))
	extra.setdefault('start_location', 'GEU Main Gate')
	extra.setdefault('end_location', 'ISBT Dehradun')
	extra.setdefault('route', 'Clement Town')
	return Ride.objects.create(driver=driver, total_seats=seats, available_seats=seats, **extra)


class RideViewTestCase(TestCase):
	def setUp(self):
		cache.clear()
		self.factory = APIRequestFactory()
		self.driver = make_user('driver@geu.ac.in', 'Driver')
		self.rider_a = make_user('a@geu.ac.in', 'Rider A')
		self.rider_b = make_user('b@geu.ac.in', 'Rider B')
		self.rider_c = make_user('c@gehu.ac.in', 'Rider C')

	def call(self, view, method, user, data=None, **kwargs):
		request = getattr(self.factory, method)('/', data or {}, format='json')
		force_authenticate(request, user=user)
		return view(request, **kwargs)

	def join(self, user, ride, pickup='Library'):
		return self.call(join_ride, 'post', user, {'pickupLocation': pickup}, ride_id=ride.id)

	def decide(self, ride, passenger, status, driver=None):
		return self.call(
			update_passenger_status, 'put', driver or self.driver,
			{'status': status}, ride_id=ride.id, user_id=passenger.id
		)

	def entry_status(self, ride, user):
		return PassengerRequest.objects.get(ride=ride, user=user).status


class RideScenarioTests(RideViewTestCase):
	def test_full_ride_lifecycle_with_seats_points_and_ratings(self):
		response = self.call(rides, 'post', self.driver, {
			'startLocation': 'GEU Main Gate',
			'endLocation': 'ISBT Dehradun',
			'route': 'Clement Town',
			'departureTime': (timezone.now() + timedelta(hours=5)).isoformat(),
			'totalSeats': 2,
		})
		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['ride']['availableSeats'], 2)
		ride = Ride.objects.get(pk=response.data['ride']['id'])
		self.assertIn(ride, self.driver.ride_history.all())

		# A joins: pending, no seat taken yet
		response = self.join(self.rider_a, ride)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Request to join ride sent successfully')
		ride.refresh_from_db()
		self.assertEqual(ride.available_seats, 2)
		self.assertEqual(self.entry_status(ride, self.rider_a), 'pending')

		response = self.decide(ride, self.rider_a, 'accepted')
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Passenger request accepted')
		self.assertEqual(response.data['ride']['availableSeats'], 1)

		self.assertEqual(self.join(self.rider_b, ride).status_code, 200)
		self.assertEqual(self.join(self.rider_c, ride).status_code, 200)

		self.assertEqual(self.decide(ride, self.rider_b, 'accepted').status_code, 200)
		ride.refresh_from_db()
		self.assertEqual(ride.available_seats, 0)

		# No seat left for C; the entry stays pending
		response = self.decide(ride, self.rider_c, 'accepted')
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'No seats available for this ride')
		ride.refresh_from_db()
		self.assertEqual(ride.available_seats, 0)
		self.assertEqual(self.entry_status(ride, self.rider_c), 'pending')

		response = self.call(complete_ride, 'put', self.driver, ride_id=ride.id)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['pointsEarned'], 10)
		self.assertEqual(response.data['ride']['status'], 'completed')
		self.assertEqual(self.entry_status(ride, self.rider_a), 'completed')
		self.assertEqual(self.entry_status(ride, self.rider_b), 'completed')
		self.assertEqual(self.entry_status(ride, self.rider_c), 'pending')
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.points, 10)

		response = self.call(rate_ride, 'post', self.rider_a, {'rating': 5, 'comment': 'Smooth'}, ride_id=ride.id)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Rating submitted successfully')
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.average_rating, 5.0)

		response = self.call(rate_ride, 'post', self.rider_a, {'rating': 1}, ride_id=ride.id)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'You have already rated this ride')

		self.assertEqual(self.call(rate_ride, 'post', self.rider_b, {'rating': 3}, ride_id=ride.id).status_code, 200)
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.average_rating, 4.0)
		self.assertEqual(Rating.objects.filter(ride=ride).count(), 2)

	def test_second_completion_fails_without_double_award(self):
		ride = make_ride(self.driver)
		self.join(self.rider_a, ride)
		self.decide(ride, self.rider_a, 'accepted')

		first = self.call(complete_ride, 'put', self.driver, ride_id=ride.id)
		second = self.call(complete_ride, 'put', self.driver, ride_id=ride.id)

		self.assertEqual(first.status_code, 200)
		self.assertEqual(second.status_code, 400)
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.points, 5)

	def test_only_driver_can_complete(self):
		ride = make_ride(self.driver)
		response = self.call(complete_ride, 'put', self.rider_a, ride_id=ride.id)

		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['message'], 'Not authorized to complete this ride')


class JoinRideTests(RideViewTestCase):
	def test_driver_cannot_join_own_ride(self):
		ride = make_ride(self.driver)
		response = self.join(self.driver, ride)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'You cannot join your own ride')

	def test_duplicate_join_is_rejected(self):
		ride = make_ride(self.driver)
		self.join(self.rider_a, ride)
		response = self.join(self.rider_a, ride)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'You have already requested to join this ride')
		self.assertEqual(ride.passengers.filter(user=self.rider_a).count(), 1)

	def test_full_ride_refuses_join(self):
		ride = make_ride(self.driver, seats=1)
		Ride.objects.filter(pk=ride.pk).update(available_seats=0)

		response = self.join(self.rider_a, ride)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'No seats available for this ride')

	def test_started_ride_refuses_join(self):
		ride = make_ride(self.driver)
		self.assertEqual(self.call(start_ride, 'put', self.driver, ride_id=ride.id).status_code, 200)

		response = self.join(self.rider_a, ride)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'This ride is no longer available')

	def test_pickup_location_is_required(self):
		ride = make_ride(self.driver)
		response = self.call(join_ride, 'post', self.rider_a, {}, ride_id=ride.id)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['errors'][0]['field'], 'pickupLocation')

	def test_unknown_ride_is_not_found(self):
		response = self.join(self.rider_a, Ride(pk=9999))
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['message'], 'Ride not found')


class PassengerStatusTests(RideViewTestCase):
	def setUp(self):
		super().setUp()
		self.ride = make_ride(self.driver)
		self.join(self.rider_a, self.ride)

	def test_non_driver_cannot_decide(self):
		response = self.decide(self.ride, self.rider_a, 'accepted', driver=self.rider_b)

		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['message'], 'Not authorized to update passenger status')
		self.assertEqual(self.entry_status(self.ride, self.rider_a), 'pending')

	def test_invalid_status_is_rejected(self):
		response = self.decide(self.ride, self.rider_a, 'completed')
		self.assertEqual(response.status_code, 400)

	def test_unknown_passenger_is_not_found(self):
		response = self.decide(self.ride, self.rider_b, 'accepted')

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['message'], 'Passenger not found in this ride')

	def test_reaccepting_does_not_take_a_second_seat(self):
		self.assertEqual(self.decide(self.ride, self.rider_a, 'accepted').status_code, 200)
		response = self.decide(self.ride, self.rider_a, 'accepted')

		self.assertEqual(response.status_code, 400)
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.available_seats, 1)

	def test_rejection_keeps_seats(self):
		response = self.decide(self.ride, self.rider_a, 'rejected')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['message'], 'Passenger request rejected')
		self.ride.refresh_from_db()
		self.assertEqual(self.ride.available_seats, 2)
		self.assertEqual(self.entry_status(self.ride, self.rider_a), 'rejected')

		# A rejected request cannot be accepted afterwards
		self.assertEqual(self.decide(self.ride, self.rider_a, 'accepted').status_code, 400)

	def test_completed_ride_entries_cannot_change(self):
		self.call(complete_ride, 'put', self.driver, ride_id=self.ride.id)
		response = self.decide(self.ride, self.rider_a, 'accepted')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(self.entry_status(self.ride, self.rider_a), 'pending')


class StartRideTests(RideViewTestCase):
	def test_start_moves_ride_in_progress_once(self):
		ride = make_ride(self.driver)

		self.assertEqual(self.call(start_ride, 'put', self.rider_a, ride_id=ride.id).status_code, 403)

		response = self.call(start_ride, 'put', self.driver, ride_id=ride.id)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['ride']['status'], 'in-progress')

		self.assertEqual(self.call(start_ride, 'put', self.driver, ride_id=ride.id).status_code, 400)

	def test_in_progress_ride_can_still_accept_and_complete(self):
		ride = make_ride(self.driver)
		self.join(self.rider_a, ride)
		self.call(start_ride, 'put', self.driver, ride_id=ride.id)

		self.assertEqual(self.decide(ride, self.rider_a, 'accepted').status_code, 200)
		response = self.call(complete_ride, 'put', self.driver, ride_id=ride.id)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['pointsEarned'], 5)


class RateRideTests(RideViewTestCase):
	def setUp(self):
		super().setUp()
		self.ride = make_ride(self.driver)
		self.join(self.rider_a, self.ride)
		self.join(self.rider_b, self.ride)
		self.decide(self.ride, self.rider_a, 'accepted')
		self.decide(self.ride, self.rider_b, 'rejected')

	def rate(self, user, rating=4):
		return self.call(rate_ride, 'post', user, {'rating': rating}, ride_id=self.ride.id)

	def test_cannot_rate_before_completion(self):
		response = self.rate(self.rider_a)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'Cannot rate a ride that is not completed')

	def test_non_participants_cannot_rate(self):
		self.call(complete_ride, 'put', self.driver, ride_id=self.ride.id)

		for user in (self.rider_b, self.rider_c):
			response = self.rate(user)
			self.assertEqual(response.status_code, 403)
			self.assertEqual(response.data['message'], 'You were not part of this ride')

	def test_driver_rating_passengers_is_rejected(self):
		self.call(complete_ride, 'put', self.driver, ride_id=self.ride.id)
		response = self.rate(self.driver)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['message'], 'Driver rating passengers feature not implemented')
		self.assertFalse(Rating.objects.exists())

	def test_rating_must_be_between_one_and_five(self):
		self.call(complete_ride, 'put', self.driver, ride_id=self.ride.id)

		for value in (0, 6):
			response = self.rate(self.rider_a, value)
			self.assertEqual(response.status_code, 400)
			self.assertEqual(response.data['errors'][0]['message'], 'Rating must be between 1 and 5')
		self.assertFalse(PassengerRequest.objects.get(ride=self.ride, user=self.rider_a).has_rated)


class CreateAndListRideTests(RideViewTestCase):
	def create(self, **overrides):
		payload = {
			'startLocation': 'GEU Main Gate',
			'endLocation': 'ISBT Dehradun',
			'route': 'Clement Town',
			'departureTime': (timezone.now() + timedelta(hours=2)).isoformat(),
			'totalSeats': 3,
		}
		payload.update(overrides)
		return self.call(rides, 'post', self.driver, payload)

	def test_departure_must_be_in_the_future(self):
		response = self.create(departureTime=(timezone.now() - timedelta(minutes=1)).isoformat())

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['errors'][0]['message'], 'Departure time must be in the future')
		self.assertFalse(Ride.objects.exists())

	def test_total_seats_bounds(self):
		self.assertEqual(self.create(totalSeats=0).status_code, 400)
		self.assertEqual(self.create(totalSeats=11).status_code, 400)
		self.assertEqual(self.create(totalSeats=10).status_code, 201)

	def test_listing_shows_open_rides_soonest_first(self):
		later = make_ride(self.driver, departure_time=timezone.now() + timedelta(days=3))
		sooner = make_ride(self.driver, departure_time=timezone.now() + timedelta(days=1))
		full = make_ride(self.driver, seats=1)
		Ride.objects.filter(pk=full.pk).update(available_seats=0)
		done = make_ride(self.driver)
		Ride.objects.filter(pk=done.pk).update(status=Ride.Status.COMPLETED)

		response = self.call(rides, 'get', self.rider_a)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 2)
		self.assertEqual([r['id'] for r in response.data['rides']], [sooner.id, later.id])
		self.assertEqual(response.data['rides'][0]['driver']['name'], 'Driver')

	def test_listing_filters_by_location_and_date(self):
		departure = timezone.now() + timedelta(days=2)
		match = make_ride(self.driver, departure_time=departure, end_location='Rajpur Road')
		make_ride(self.driver, departure_time=departure, end_location='Clock Tower')
		make_ride(self.driver, departure_time=departure + timedelta(days=1), end_location='Rajpur Road')

		client = APIClient()
		client.force_authenticate(user=self.rider_a)
		response = client.get(reverse('rides:rides'), {
			'endLocation': 'rajpur',
			'date': timezone.localtime(departure).date().isoformat(),
		})

		self.assertEqual(response.status_code, 200)
		self.assertEqual([r['id'] for r in response.data['rides']], [match.id])

	def test_listing_requires_authentication(self):
		response = APIClient().get(reverse('rides:rides'))
		self.assertEqual(response.status_code, 401)


class SeatInvariantTests(TestCase):
	def setUp(self):
		self.driver = make_user('driver@geu.ac.in')
		self.ride = make_ride(self.driver, seats=2)

	def test_database_rejects_seats_above_total(self):
		with self.assertRaises(IntegrityError), transaction.atomic():
			Ride.objects.filter(pk=self.ride.pk).update(available_seats=F('total_seats') + 1)

	def test_database_rejects_duplicate_passenger(self):
		rider = make_user('a@geu.ac.in')
		PassengerRequest.objects.create(ride=self.ride, user=rider, pickup_location='Gate')

		with self.assertRaises(IntegrityError), transaction.atomic():
			PassengerRequest.objects.create(ride=self.ride, user=rider, pickup_location='Gate')

	def test_acceptance_never_drives_seats_negative(self):
		riders = [make_user(f'r{i}@geu.ac.in') for i in range(3)]
		for rider in riders:
			ride_lifecycle.request_to_join(rider, self.ride.id, 'Gate')

		ride_lifecycle.update_passenger_status(self.driver, self.ride.id, riders[0].id, 'accepted')
		ride_lifecycle.update_passenger_status(self.driver, self.ride.id, riders[1].id, 'accepted')
		with self.assertRaises(NoSeatsAvailableError):
			ride_lifecycle.update_passenger_status(self.driver, self.ride.id, riders[2].id, 'accepted')

		self.ride.refresh_from_db()
		self.assertEqual(self.ride.available_seats, 0)

	def test_stale_ride_cannot_be_completed_twice(self):
		stale = Ride.objects.get(pk=self.ride.pk)
		ride_lifecycle.complete_ride(self.driver, self.ride.id)

		# The second caller loaded the ride before completion
		self.assertFalse(ride_lifecycle._transition_ride(stale, Ride.Status.COMPLETED))
		with self.assertRaises(InvalidTransitionError):
			ride_lifecycle.complete_ride(self.driver, self.ride.id)


class RequestBodyFormatTests(RideViewTestCase):
	def test_form_encoded_join_is_refused(self):
		ride = make_ride(self.driver)
		request = self.factory.post('/', {'pickupLocation': 'Library'}, format='multipart')
		force_authenticate(request, user=self.rider_a)

		response = join_ride(request, ride_id=ride.id)

		self.assertEqual(response.status_code, 415)
		self.assertFalse(response.data['success'])
		self.assertFalse(PassengerRequest.objects.filter(ride=ride).exists())

	def test_json_join_is_accepted(self):
		ride = make_ride(self.driver)

		response = self.join(self.rider_a, ride)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(self.entry_status(ride, self.rider_a), PassengerRequest.Status.PENDING)
