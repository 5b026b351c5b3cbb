from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='CustomUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='email_address')),
                ('username', models.CharField(max_length=150, null=True, unique=True, verbose_name='username')),
                ('nickname', models.CharField(blank=True, max_length=150, verbose_name='nickname')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(auto_now_add=True, verbose_name='date joined')),
                ('role', models.CharField(choices=[('student', 'Student'), ('teacher', 'Teacher')], default='student', max_length=16, verbose_name='role')),
                ('grade', models.CharField(blank=True, help_text='Grade room the student belongs to, e.g. "M.4/2".', max_length=60, verbose_name='grade room')),
                ('class_code', models.CharField(blank=True, max_length=32, verbose_name='class code')),
                ('enrollment_status', models.CharField(choices=[('none', 'Not enrolled'), ('pending', 'Pending approval'), ('approved', 'Approved')], default='none', max_length=16, verbose_name='enrollment status')),
                ('managed_class_codes', models.JSONField(blank=True, default=list, verbose_name='managed class codes')),
                ('assigned_class_codes', models.JSONField(blank=True, default=list, verbose_name='assigned class codes')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
            },
        ),
    ]
