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
            name='TaskProgress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('task_id', models.CharField(max_length=255, verbose_name='task id')),
                ('status', models.CharField(choices=[('not_started', 'Not started'), ('in_progress', 'In progress'), ('ready_to_submit', 'Ready to submit'), ('submitted', 'Submitted'), ('pending_review', 'Pending review'), ('returned', 'Returned')], default='not_started', max_length=32, verbose_name='status')),
                ('completed_at', models.DateTimeField(blank=True, help_text='Set the first time the task enters a done status; cleared on revert.', null=True, verbose_name='completed at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='task_progress', to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={
                'verbose_name': 'Task progress',
                'verbose_name_plural': 'Task progress',
            },
        ),
        migrations.CreateModel(
            name='PriorityOverride',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('task_id', models.CharField(max_length=255, verbose_name='task id')),
                ('priority_score', models.PositiveSmallIntegerField(blank=True, help_text='AI-calculated score for prioritization (0-100).', null=True, verbose_name='priority score')),
                ('priority_reason', models.JSONField(blank=True, null=True, verbose_name='priority reason')),
                ('priority_level', models.CharField(blank=True, default='', max_length=16, verbose_name='priority level')),
                ('next_actions', models.JSONField(blank=True, default=list, verbose_name='next actions')),
                ('assumptions', models.JSONField(blank=True, default=list, verbose_name='assumptions')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='priority_overrides', to=settings.AUTH_USER_MODEL, verbose_name='user')),
            ],
            options={
                'verbose_name': 'Priority override',
                'verbose_name_plural': 'Priority overrides',
            },
        ),
        migrations.AddConstraint(
            model_name='taskprogress',
            constraint=models.UniqueConstraint(fields=('user', 'task_id'), name='unique_progress_per_user_task'),
        ),
        migrations.AddConstraint(
            model_name='priorityoverride',
            constraint=models.UniqueConstraint(fields=('user', 'task_id'), name='unique_override_per_user_task'),
        ),
    ]
