from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import OneTimePassword, PendingUser, User


@admin.register(User)
class SpotUserAdmin(UserAdmin):
    ordering = ("-created_at",)
    list_display = ("email", "name", "role", "is_premium", "is_staff", "created_at")
    list_filter = ("role", "is_premium", "is_staff", "is_superuser", "is_active")
    search_fields = ("email", "name")
    readonly_fields = ("created_at", "last_login", "date_joined")
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name", "role", "is_premium", "interests", "location_lat", "location_lng", "profile_image")}),
        ("Identity providers", {"fields": ("google_id", "github_id")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Dates", {"fields": ("last_login", "date_joined", "created_at")}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "name", "role", "password1", "password2"),
        }),
    )


@admin.register(PendingUser)
class PendingUserAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "role", "created_at", "expires_at", "expired")
    search_fields = ("email", "name")

    @admin.display(boolean=True)
    def expired(self, obj):
        return obj.is_expired()


@admin.register(OneTimePassword)
class OneTimePasswordAdmin(admin.ModelAdmin):
    list_display = ("email", "purpose", "created_at", "expires_at")
    list_filter = ("purpose",)
    exclude = ("code_hash",)
