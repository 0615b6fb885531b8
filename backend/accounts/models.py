"""
Accounts app models.

Defines the fixed municipal role hierarchy and a custom User model that
extends Django's ``AbstractUser``.  Citizens file complaints; stakeholder
offices and the three anti-corruption tiers handle them.

Hierarchy (lowest → highest authority)::

    stakeholder_office → wereda_anti_corruption
        → kifleketema_anti_corruption → kentiba_biro
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class UserRole(models.TextChoices):
    """
    Fixed roles.  The four office roles share their values with
    ``complaints.models.ComplaintHandler`` so a user's role can be compared
    directly with a complaint's current handler.
    """

    CITIZEN = "citizen", "Citizen"
    STAKEHOLDER_OFFICE = "stakeholder_office", "Stakeholder Office"
    WEREDA_ANTI_CORRUPTION = "wereda_anti_corruption", "Wereda Anti-Corruption Officer"
    KIFLEKETEMA_ANTI_CORRUPTION = "kifleketema_anti_corruption", "Kifleketema Anti-Corruption Officer"
    KENTIBA_BIRO = "kentiba_biro", "Kentiba Biro"


#: Roles that handle complaints (everything except citizens).
OFFICE_ROLES = frozenset({
    UserRole.STAKEHOLDER_OFFICE,
    UserRole.WEREDA_ANTI_CORRUPTION,
    UserRole.KIFLEKETEMA_ANTI_CORRUPTION,
    UserRole.KENTIBA_BIRO,
})

#: Roles that can only be self-registered with an administrator code.
ADMIN_ROLES = frozenset({
    UserRole.WEREDA_ANTI_CORRUPTION,
    UserRole.KIFLEKETEMA_ANTI_CORRUPTION,
    UserRole.KENTIBA_BIRO,
})


class OfficeType(models.TextChoices):
    """Kinds of stakeholder office a complaint can be directed to."""

    TRADE_OFFICE = "trade_office", "Trade Office"
    ID_OFFICE = "id_office", "ID Office"
    LAND_OFFICE = "land_office", "Land Office"
    TAX_OFFICE = "tax_office", "Tax Office"
    COURT_OFFICE = "court_office", "Court Office"
    POLICE_OFFICE = "police_office", "Police Office"
    EDUCATION_OFFICE = "education_office", "Education Office"
    HEALTH_OFFICE = "health_office", "Health Office"
    TRANSPORT_OFFICE = "transport_office", "Transport Office"
    WATER_OFFICE = "water_office", "Water Office"
    ELECTRICITY_OFFICE = "electricity_office", "Electricity Office"
    TELECOM_OFFICE = "telecom_office", "Telecom Office"
    IMMIGRATION_OFFICE = "immigration_office", "Immigration Office"
    SOCIAL_AFFAIRS_OFFICE = "social_affairs_office", "Social Affairs Office"
    OTHER = "other", "Other"


class Kifleketema(models.TextChoices):
    """Addis Ababa sub-cities."""

    LEMI_KURA = "Lemi Kura", "Lemi Kura"
    ARADA = "Arada", "Arada"
    ADDIS_KETEMA = "Addis Ketema", "Addis Ketema"
    LIDETA = "Lideta", "Lideta"
    KIRKOS = "Kirkos", "Kirkos"
    YEKA = "Yeka", "Yeka"
    BOLE = "Bole", "Bole"
    AKAKY_KALITI = "Akaky Kaliti", "Akaky Kaliti"
    NIFAS_SILK_LAFTO = "Nifas Silk-Lafto", "Nifas Silk-Lafto"
    KOLFE_KERANIO = "Kolfe Keranio", "Kolfe Keranio"
    GULELE = "Gulele", "Gulele"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class User(AbstractUser):
    """
    Custom user model shared by citizens and office accounts.

    Login is supported via *any one* of username / email / id_number /
    phone together with the password.  Registration sets ``username`` to
    the email address.

    Office accounts (every role except ``citizen``) must be approved before
    they can receive complaints; Kentiba Biro accounts are approved on
    creation.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    phone = models.CharField(
        max_length=20,
        verbose_name="Phone Number",
        db_index=True,
    )
    id_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name="ID Number",
        help_text="National identification number.",
    )
    address = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Address",
    )
    role = models.CharField(
        max_length=30,
        choices=UserRole.choices,
        default=UserRole.CITIZEN,
        verbose_name="Role",
        db_index=True,
    )

    # ── Stakeholder office details ──────────────────────────────────
    office_name = models.CharField(max_length=255, blank=True, default="", verbose_name="Office Name")
    office_type = models.CharField(
        max_length=30,
        choices=OfficeType.choices,
        blank=True,
        default="",
        verbose_name="Office Type",
    )
    office_address = models.CharField(max_length=255, blank=True, default="", verbose_name="Office Address")
    office_phone = models.CharField(max_length=20, blank=True, default="", verbose_name="Office Phone")

    # ── Administrative area ─────────────────────────────────────────
    kifleketema = models.CharField(
        max_length=30,
        choices=Kifleketema.choices,
        blank=True,
        default="",
        verbose_name="Kifleketema (Sub-city)",
    )
    wereda = models.CharField(max_length=50, blank=True, default="", verbose_name="Wereda")

    is_approved = models.BooleanField(
        default=False,
        verbose_name="Approved",
        help_text="Office accounts must be approved before handling complaints.",
    )

    REQUIRED_FIELDS = ["email", "id_number", "phone", "first_name", "last_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        label = self.office_name or self.get_full_name() or self.username
        return f"{label} ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        if self._state.adding and self.role == UserRole.KENTIBA_BIRO:
            self.is_approved = True
        super().save(*args, **kwargs)

    # ── Helper predicates for role checks ────────────────────────────

    def has_role(self, *roles: str) -> bool:
        """Check if the user's role is one of ``roles``."""
        return self.role in roles

    @property
    def is_citizen(self) -> bool:
        return self.role == UserRole.CITIZEN

    @property
    def is_office(self) -> bool:
        """True for stakeholder offices and every anti-corruption tier."""
        return self.role in OFFICE_ROLES
