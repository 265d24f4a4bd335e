from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for the email-keyed User model."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Campus user keyed by institutional email, with reputation fields."""

    class Role(models.TextChoices):
        STUDENT = 'student', 'Student'
        ADMIN = 'admin', 'Admin'

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    username = None
    first_name = None
    last_name = None

    # Identity & profile
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    college_id = models.CharField(max_length=50)
    phone_number = models.CharField(max_length=20, blank=True, default='')
    profile_picture = models.URLField(max_length=500, blank=True, default='')

    role = models.CharField(max_length=10, choices=Role.choices, default=Role.STUDENT)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)

    # Reputation
    points = models.PositiveIntegerField(default=0)
    average_rating = models.FloatField(default=0)

    # Password reset (only the sha256 digest of the emailed token is stored)
    reset_password_token = models.CharField(max_length=64, blank=True, default='', db_index=True)
    reset_password_expire = models.DateTimeField(null=True, blank=True)

    ride_history = models.ManyToManyField(
        'rides.Ride',
        blank=True,
        related_name='+',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name', 'college_id']

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        # is_active follows status so the auth backends refuse inactive users
        self.is_active = self.status == self.Status.ACTIVE
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'is_active'}
        super().save(*args, **kwargs)

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN
