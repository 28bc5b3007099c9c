from django.contrib import admin

from .models import CheckIn, Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("ticket_code", "event", "user", "status", "checked_in_at", "created_at")
    list_filter = ("status",)
    search_fields = ("ticket_code", "user__email", "event__title")
    raw_id_fields = ("event", "user", "transaction")


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ("ticket", "event", "scanned_by", "location", "scanned_at")
    search_fields = ("ticket__ticket_code", "event__title")
    raw_id_fields = ("event", "ticket", "scanned_by")
