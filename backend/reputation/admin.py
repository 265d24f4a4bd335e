from django.contrib import admin
from .models import Rating


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ("ride", "rater", "ratee", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("ride__id", "rater__email", "ratee__email")
    readonly_fields = ("created_at",)
