import django.contrib.auth.models
import django.contrib.auth.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="Email Address")),
                ("phone", models.CharField(db_index=True, max_length=20, verbose_name="Phone Number")),
                ("id_number", models.CharField(help_text="National identification number.", max_length=50, unique=True, verbose_name="ID Number")),
                ("address", models.CharField(blank=True, default="", max_length=255, verbose_name="Address")),
                ("role", models.CharField(choices=[("citizen", "Citizen"), ("stakeholder_office", "Stakeholder Office"), ("wereda_anti_corruption", "Wereda Anti-Corruption Officer"), ("kifleketema_anti_corruption", "Kifleketema Anti-Corruption Officer"), ("kentiba_biro", "Kentiba Biro")], db_index=True, default="citizen", max_length=30, verbose_name="Role")),
                ("office_name", models.CharField(blank=True, default="", max_length=255, verbose_name="Office Name")),
                ("office_type", models.CharField(blank=True, choices=[("trade_office", "Trade Office"), ("id_office", "ID Office"), ("land_office", "Land Office"), ("tax_office", "Tax Office"), ("court_office", "Court Office"), ("police_office", "Police Office"), ("education_office", "Education Office"), ("health_office", "Health Office"), ("transport_office", "Transport Office"), ("water_office", "Water Office"), ("electricity_office", "Electricity Office"), ("telecom_office", "Telecom Office"), ("immigration_office", "Immigration Office"), ("social_affairs_office", "Social Affairs Office"), ("other", "Other")], default="", max_length=30, verbose_name="Office Type")),
                ("office_address", models.CharField(blank=True, default="", max_length=255, verbose_name="Office Address")),
                ("office_phone", models.CharField(blank=True, default="", max_length=20, verbose_name="Office Phone")),
                ("kifleketema", models.CharField(blank=True, choices=[("Lemi Kura", "Lemi Kura"), ("Arada", "Arada"), ("Addis Ketema", "Addis Ketema"), ("Lideta", "Lideta"), ("Kirkos", "Kirkos"), ("Yeka", "Yeka"), ("Bole", "Bole"), ("Akaky Kaliti", "Akaky Kaliti"), ("Nifas Silk-Lafto", "Nifas Silk-Lafto"), ("Kolfe Keranio", "Kolfe Keranio"), ("Gulele", "Gulele")], default="", max_length=30, verbose_name="Kifleketema (Sub-city)")),
                ("wereda", models.CharField(blank=True, default="", max_length=50, verbose_name="Wereda")),
                ("is_approved", models.BooleanField(default=False, help_text="Office accounts must be approved before handling complaints.", verbose_name="Approved")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "User",
                "verbose_name_plural": "Users",
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
    ]
