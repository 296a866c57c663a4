from django.db import migrations

DEFAULT_CATEGORIES = [
    "Building Materials",
    "Tools & Equipment",
    "Safety Equipment",
    "Electrical Supplies",
    "Plumbing Supplies",
    "Hardware & Fasteners",
    "Paints & Coatings",
    "Flooring Materials",
]


def seed_categories(apps, schema_editor):
    Category = apps.get_model("catalog", "Category")
    for name in DEFAULT_CATEGORIES:
        Category.objects.get_or_create(name=name)


def remove_categories(apps, schema_editor):
    Category = apps.get_model("catalog", "Category")
    Category.objects.filter(name__in=DEFAULT_CATEGORIES, inventory_items__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_categories, remove_categories),
    ]
