from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        extra_fields.setdefault("name", email.split("@")[0])
        user = self.model(email=email, **extra_fields)
        # None -> unusable password (OAuth-only account)
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
        extra_fields.setdefault("role", User.ROLE_ADMIN)
        return self._create_user(email, password, **extra_fields)

    def create_from_pending(self, pending):
        """
        Promote a PendingUser. Its password is already hashed, so it is
        copied as-is instead of going through set_password().
        """
        user = self.model(
            email=pending.email,
            name=pending.name,
            role=pending.role,
            interests=list(pending.interests or []),
            profile_image=pending.profile_image,
            password=pending.password,
        )
        user.save(using=self._db)
        return user


class User(AbstractUser):
    ROLE_USER = "user"
    ROLE_ORGANIZER = "organizer"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = (
        (ROLE_USER, "User"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_ADMIN, "Admin"),
    )

    # Identity is email + display name; Django's username is not used
    username = None

    name = models.CharField(max_length=150, unique=True)
    email = models.EmailField(unique=True)

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_USER,
    )

    is_premium = models.BooleanField(default=False)
    interests = models.JSONField(default=list, blank=True, help_text="List of interest tags")
    location_lat = models.FloatField(default=0)
    location_lng = models.FloatField(default=0)
    profile_image = models.CharField(max_length=1024, blank=True, null=True)

    bookmarks = models.ManyToManyField(
        "events.Event",
        related_name="bookmarked_by",
        blank=True,
    )

    # OAuth identities
    google_id = models.CharField(max_length=255, blank=True, null=True, unique=True)
    github_id = models.CharField(max_length=255, blank=True, null=True, unique=True)

    # Single active refresh token; a new login replaces it
    refresh_token = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def __str__(self):
        return self.email


class PendingUser(models.Model):
    """
    Signup staged until the emailed OTP is verified.
    Lives for PENDING_USER_TTL after created_at.
    """
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128, help_text="Already hashed")
    role = models.CharField(
        max_length=30,
        choices=[(User.ROLE_USER, "User"), (User.ROLE_ORGANIZER, "Organizer")],
        default=User.ROLE_USER,
    )
    interests = models.JSONField(default=list, blank=True)
    profile_image = models.CharField(max_length=1024, blank=True, null=True)
    # Refreshed on every re-registration, so not auto_now_add
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    def __str__(self):
        return f"pending:{self.email}"

    @property
    def expires_at(self):
        return self.created_at + settings.PENDING_USER_TTL

    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at


class OneTimePassword(models.Model):
    PURPOSE_SIGNUP = "signup"
    PURPOSE_FORGOT_PASSWORD = "forgot-password"

    PURPOSE_CHOICES = [
        (PURPOSE_SIGNUP, "Signup"),
        (PURPOSE_FORGOT_PASSWORD, "Forgot password"),
    ]

    email = models.EmailField(db_index=True)
    purpose = models.CharField(max_length=32, choices=PURPOSE_CHOICES)
    code_hash = models.CharField(max_length=128)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(
                fields=["email", "purpose", "created_at"],
                name="otp_email_purpose_idx",
            ),
        ]

    def __str__(self):
        return f"{self.purpose}:{self.email}"

    @property
    def expires_at(self):
        return self.created_at + settings.OTP_TTL
