from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
        ('rides', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='user',
            name='ride_history',
            field=models.ManyToManyField(blank=True, related_name='+', to='rides.ride'),
        ),
    ]
