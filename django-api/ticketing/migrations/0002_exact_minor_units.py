from django.db import migrations

import ticketing.models


class Migration(migrations.Migration):

    dependencies = [
        ("ticketing", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="tickettier",
            name="price",
            field=ticketing.models.MinorUnitsField(),
        ),
        migrations.AlterField(
            model_name="ticket",
            name="total_amount_paid",
            field=ticketing.models.MinorUnitsField(),
        ),
    ]
