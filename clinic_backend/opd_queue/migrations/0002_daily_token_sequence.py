from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("opd_queue", "0001_initial"),
    ]

    operations = [
        migrations.RemoveConstraint(
            model_name="queueentry",
            name="uniq_queue_doctor_date_token",
        ),
        migrations.RemoveConstraint(
            model_name="queueentry",
            name="uniq_queue_date_token_no_doctor",
        ),
        migrations.AddConstraint(
            model_name="queueentry",
            constraint=models.UniqueConstraint(fields=("queue_date", "token_number"), name="uniq_queue_date_token"),
        ),
        migrations.CreateModel(
            name="QueueTokenCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("queue_date", models.DateField(unique=True)),
                ("last_token", models.PositiveIntegerField(default=0)),
            ],
        ),
    ]
