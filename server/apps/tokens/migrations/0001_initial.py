import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuthToken',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('value', models.CharField(help_text='Bearer credential sent by clients', max_length=64, unique=True)),
                ('is_active', models.BooleanField(default=True, help_text='False once the user logged out')),
                ('expires_at', models.DateTimeField(db_index=True, help_text='Removed by the sweep after this moment')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='auth_tokens', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Auth Token',
                'verbose_name_plural': 'Auth Tokens',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['user', 'is_active'], name='tokens_user_active_idx')],
            },
        ),
    ]
