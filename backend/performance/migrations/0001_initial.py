import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("complaints", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="OfficePerformance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("office_role", models.CharField(db_index=True, max_length=30, verbose_name="Office Role")),
                ("total_complaints", models.PositiveIntegerField(default=0, verbose_name="Total Complaints")),
                ("resolved_complaints", models.PositiveIntegerField(default=0, verbose_name="Resolved Complaints")),
                ("escalated_complaints", models.PositiveIntegerField(default=0, verbose_name="Escalated Complaints")),
                ("average_resolution_time", models.FloatField(default=0.0, verbose_name="Average Resolution Time (days)")),
                ("office", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="performance_records", to=settings.AUTH_USER_MODEL, verbose_name="Office")),
            ],
            options={
                "verbose_name": "Office Performance",
                "verbose_name_plural": "Office Performance",
                "ordering": ["office_role", "office_id"],
                "constraints": [models.UniqueConstraint(fields=("office", "office_role"), name="unique_performance_per_office_role")],
            },
        ),
        migrations.CreateModel(
            name="FailureRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("escalated_from", models.CharField(max_length=30, verbose_name="Escalated From Stage")),
                ("escalated_to", models.CharField(max_length=30, verbose_name="Escalated To Stage")),
                ("reason", models.TextField(blank=True, default="", verbose_name="Reason")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="failure_records", to="complaints.complaint", verbose_name="Complaint")),
                ("performance", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="failure_records", to="performance.officeperformance", verbose_name="Performance")),
            ],
            options={
                "verbose_name": "Failure Record",
                "verbose_name_plural": "Failure Records",
                "ordering": ["-created_at", "-pk"],
            },
        ),
    ]
