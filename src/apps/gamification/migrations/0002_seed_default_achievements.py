from django.db import migrations

DEFAULT_ACHIEVEMENTS = (
    ("first_resolution", "First Resolution", "Resolved your first ticket", "star", "bronze", 50),
    ("resolution_master", "Resolution Master", "Resolved 100 tickets", "trophy", "gold", 1000),
    (
        "customer_champion",
        "Customer Champion",
        "Maintained a 4.8 customer satisfaction rating",
        "crown",
        "purple",
        500,
    ),
    (
        "lightning_fast",
        "Lightning Fast",
        "Average first response within 5 minutes",
        "zap",
        "blue",
        300,
    ),
)


def seed_achievements(apps, schema_editor):
    Achievement = apps.get_model("gamification", "Achievement")
    for code, name, description, icon, color, points_reward in DEFAULT_ACHIEVEMENTS:
        Achievement.objects.update_or_create(
            code=code,
            defaults={
                "name": name,
                "description": description,
                "icon": icon,
                "color": color,
                "points_reward": points_reward,
                "is_active": True,
            },
        )


def unseed_achievements(apps, schema_editor):
    Achievement = apps.get_model("gamification", "Achievement")
    Achievement.objects.filter(
        code__in=[code for code, *_ in DEFAULT_ACHIEVEMENTS], unlocks__isnull=True
    ).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("gamification", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_achievements, unseed_achievements),
    ]
