from django.contrib import admin

from .models import PaymentTransaction, Payout, Subscription


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("payment_intent_id", "event", "user", "quantity", "amount", "platform_fee", "status", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("payment_intent_id", "user__email", "event__title")
    raw_id_fields = ("event", "user", "organizer")


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("organizer", "amount", "period_start", "period_end", "status", "paid_at")
    list_filter = ("status",)
    raw_id_fields = ("organizer", "approved_by")


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("user", "plan", "status", "current_period_end")
    list_filter = ("plan", "status")
    search_fields = ("user__email",)
