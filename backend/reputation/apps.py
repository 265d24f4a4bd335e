"""Reputation app configuration."""

from django.apps import AppConfig


class ReputationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'reputation'
