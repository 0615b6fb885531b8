import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


STAGE_CHOICES = [
    ("stakeholder_first", "Stakeholder Office (First Stage)"),
    ("stakeholder_second", "Stakeholder Office (Second Stage)"),
    ("wereda_first", "Wereda Anti-Corruption (First Stage)"),
    ("wereda_second", "Wereda Anti-Corruption (Second Stage)"),
    ("kifleketema_first", "Kifleketema Anti-Corruption (First Stage)"),
    ("kifleketema_second", "Kifleketema Anti-Corruption (Second Stage)"),
    ("kentiba", "Kentiba Biro"),
]

HANDLER_CHOICES = [
    ("stakeholder_office", "Stakeholder Office"),
    ("wereda_anti_corruption", "Wereda Anti-Corruption"),
    ("kifleketema_anti_corruption", "Kifleketema Anti-Corruption"),
    ("kentiba_biro", "Kentiba Biro"),
]

STATUS_CHOICES = [
    ("pending", "Pending"),
    ("in_progress", "In Progress"),
    ("resolved", "Resolved"),
    ("escalated", "Escalated"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(verbose_name="Description")),
                ("location", models.CharField(max_length=500, verbose_name="Location")),
                ("current_stage", models.CharField(choices=STAGE_CHOICES, db_index=True, default="stakeholder_first", max_length=30, verbose_name="Current Stage")),
                ("current_handler", models.CharField(choices=HANDLER_CHOICES, db_index=True, default="stakeholder_office", max_length=30, verbose_name="Current Handler")),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="pending", max_length=20, verbose_name="Status")),
                ("version", models.PositiveIntegerField(default=0, help_text="Optimistic concurrency counter.", verbose_name="Version")),
                ("additional_details", models.TextField(blank=True, default="", verbose_name="Additional Details")),
                ("citizen", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="complaints", to=settings.AUTH_USER_MODEL, verbose_name="Citizen")),
                ("stakeholder_office", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="received_complaints", to=settings.AUTH_USER_MODEL, verbose_name="Stakeholder Office")),
                ("related_complaint", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="follow_ups", to="complaints.complaint", verbose_name="Original Complaint")),
                ("second_stage_complaint", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="complaints.complaint", verbose_name="Second-Stage Complaint")),
            ],
            options={
                "verbose_name": "Complaint",
                "verbose_name_plural": "Complaints",
                "ordering": ["-updated_at"],
                "indexes": [models.Index(fields=["current_handler", "status"], name="complaint_handler_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="ComplaintAttachment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("file", models.FileField(upload_to="complaints/%Y/%m/", verbose_name="File")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attachments", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Attachment",
                "verbose_name_plural": "Complaint Attachments",
                "ordering": ["pk"],
            },
        ),
        migrations.CreateModel(
            name="ComplaintDeadline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stage", models.CharField(choices=STAGE_CHOICES, max_length=30, verbose_name="Stage")),
                ("due_at", models.DateTimeField(verbose_name="Response Due")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="deadlines", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Deadline",
                "verbose_name_plural": "Complaint Deadlines",
                "constraints": [models.UniqueConstraint(fields=("complaint", "stage"), name="unique_deadline_per_stage")],
            },
        ),
        migrations.CreateModel(
            name="ComplaintResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("responder_role", models.CharField(choices=HANDLER_CHOICES, max_length=30, verbose_name="Responder Role")),
                ("body", models.TextField(verbose_name="Response")),
                ("internal_comment", models.TextField(blank=True, default="", verbose_name="Internal Comment")),
                ("status", models.CharField(choices=STATUS_CHOICES, default="in_progress", max_length=20, verbose_name="Status")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="responses", to="complaints.complaint", verbose_name="Complaint")),
                ("responder", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="complaint_responses", to=settings.AUTH_USER_MODEL, verbose_name="Responder")),
            ],
            options={
                "verbose_name": "Complaint Response",
                "verbose_name_plural": "Complaint Responses",
                "ordering": ["created_at", "pk"],
            },
        ),
        migrations.CreateModel(
            name="EscalationHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("from_handler", models.CharField(choices=HANDLER_CHOICES, max_length=30, verbose_name="From")),
                ("to_handler", models.CharField(choices=HANDLER_CHOICES, max_length=30, verbose_name="To")),
                ("reason", models.TextField(blank=True, default="", verbose_name="Reason")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="escalation_history", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Escalation History Entry",
                "verbose_name_plural": "Escalation History",
                "ordering": ["created_at", "pk"],
            },
        ),
        migrations.CreateModel(
            name="ComplaintResolution",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("resolver_role", models.CharField(choices=HANDLER_CHOICES, max_length=30, verbose_name="Resolver Role")),
                ("resolution", models.TextField(verbose_name="Resolution")),
                ("complaint", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="resolution", to="complaints.complaint", verbose_name="Complaint")),
                ("resolved_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="resolved_complaints", to=settings.AUTH_USER_MODEL, verbose_name="Resolved By")),
            ],
            options={
                "verbose_name": "Complaint Resolution",
                "verbose_name_plural": "Complaint Resolutions",
            },
        ),
    ]
