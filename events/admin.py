from django.contrib import admin

from .models import AnalyticsEvent, Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('title', 'organizer', 'category', 'city', 'start_date', 'price', 'capacity', 'is_published')
    list_filter = ('is_published', 'category', 'start_date')
    search_fields = ('title', 'description', 'city', 'organizer__email', 'organizer__name')
    date_hierarchy = 'start_date'


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ('event', 'type', 'user', 'created_at')
    list_filter = ('type',)
    search_fields = ('event__title',)
