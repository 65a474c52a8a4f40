# Generated manually: generation URLs may be /media/ paths of local copies

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('studio', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='aigeneration',
            name='image_url',
            field=models.CharField(max_length=1000),
        ),
        migrations.AlterField(
            model_name='aigeneration',
            name='download_url',
            field=models.CharField(blank=True, max_length=1000),
        ),
    ]
