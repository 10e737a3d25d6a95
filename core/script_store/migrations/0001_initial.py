import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LogicScript",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("distributor_id", models.CharField(db_index=True, max_length=255)),
                (
                    "trigger_point",
                    models.CharField(
                        choices=[
                            ("storefront_load", "Storefront Load"),
                            ("add_to_cart", "Add to Cart"),
                            ("quantity_change", "Quantity Change"),
                            ("submit", "Submit Order"),
                        ],
                        max_length=32,
                    ),
                ),
                ("script_content", models.TextField()),
                ("description", models.TextField(blank=True, default="")),
                ("sequence_order", models.IntegerField(default=0)),
                ("active", models.BooleanField(default=True)),
                ("original_prompt", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "logic_scripts",
                "ordering": [
                    "distributor_id",
                    "trigger_point",
                    "sequence_order",
                    "created_at",
                    "id",
                ],
                "indexes": [
                    models.Index(
                        fields=["distributor_id", "active", "trigger_point"],
                        name="idx_logic_script_lookup",
                    )
                ],
            },
        ),
    ]
