import uuid

import django.core.validators
import django.db.models.deletion
import django.db.models.functions.text
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Board',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(max_length=100)),
                ('methodology', models.CharField(choices=[('kanban', 'Kanban'), ('simple', 'Simple')], max_length=10)),
                ('progress', models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('favorite', models.BooleanField(default=False)),
                ('column_count', models.PositiveIntegerField(default=0, editable=False)),
                ('owner_id', models.CharField(db_index=True, help_text='Opaque identity of the caller that created the board', max_length=255)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'db_table': 'board',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Column',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('ordinal', models.PositiveIntegerField(help_text='1-based, dense within the board')),
                ('board', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='columns', to='core.board')),
            ],
            options={
                'db_table': 'board_column',
                'ordering': ['board', 'ordinal'],
            },
        ),
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('deadline', models.DateTimeField()),
                ('in_calendar', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('column', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tasks', to='core.column')),
            ],
            options={
                'db_table': 'task',
                'ordering': ['created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='column',
            index=models.Index(fields=['board', 'ordinal'], name='column_board_ordinal_idx'),
        ),
        migrations.AddConstraint(
            model_name='board',
            constraint=models.UniqueConstraint(models.F('owner_id'), django.db.models.functions.text.Lower('title'), name='board_unique_owner_title'),
        ),
        migrations.AddConstraint(
            model_name='column',
            constraint=models.UniqueConstraint(models.F('board'), django.db.models.functions.text.Lower('name'), name='column_unique_board_name'),
        ),
    ]
