from datetime import timedelta

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from accounts.models import User
from rides.models import Ride
from services.reputation import award_points, record_rating, recompute_average_rating
from .models import Rating


class ReputationUpdateTests(TestCase):
	def setUp(self):
		self.driver = User.objects.create_user(
			email='driver@geu.ac.in', password='Secret123', name='Driver', college_id='D1'
		)
		self.riders = [
			User.objects.create_user(email=f'r{i}@geu.ac.in', password='Secret123', name=f'R{i}', college_id=f'R{i}')
			for i in range(3)
		]
		self.ride = Ride.objects.create(
			driver=self.driver,
			start_location='Gate',
			end_location='ISBT',
			route='Clement Town',
			departure_time=timezone.now() + timedelta(days=1),
			total_seats=3,
			available_seats=3,
			status=Ride.Status.COMPLETED,
		)

	def test_average_is_zero_without_ratings(self):
		self.assertEqual(recompute_average_rating(self.driver), 0.0)
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.average_rating, 0.0)

	def test_average_tracks_every_rating(self):
		for rider, score in zip(self.riders, (5, 4, 2)):
			record_rating(self.ride, rider, self.driver, score)

		self.driver.refresh_from_db()
		self.assertAlmostEqual(self.driver.average_rating, 11 / 3)

	def test_second_rating_for_same_ride_is_refused(self):
		record_rating(self.ride, self.riders[0], self.driver, 5)

		with self.assertRaises(IntegrityError), transaction.atomic():
			record_rating(self.ride, self.riders[0], self.driver, 1)

		self.assertEqual(Rating.objects.count(), 1)
		self.driver.refresh_from_db()
		self.assertEqual(self.driver.average_rating, 5.0)

	def test_award_points_accumulates(self):
		award_points(self.driver, 10)
		award_points(self.driver, 5)

		self.driver.refresh_from_db()
		self.assertEqual(self.driver.points, 15)

	def test_negative_points_are_refused(self):
		with self.assertRaises(ValueError):
			award_points(self.driver, -5)
