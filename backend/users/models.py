from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils.translation import gettext_lazy as _

from tasks.priority_engine.projection import Viewer
from .managers import CustomUserManager


class CustomUser(AbstractBaseUser, PermissionsMixin):
    """
    Student or teacher account. Uses email as the unique auth field.

    The classroom fields decide which assignments the user can see:
    students by approved class code or grade room, teachers by the class
    codes they manage or are assigned to.
    """

    class Role(models.TextChoices):
        STUDENT = 'student', _('Student')
        TEACHER = 'teacher', _('Teacher')

    class EnrollmentStatus(models.TextChoices):
        NONE = 'none', _('Not enrolled')
        PENDING = 'pending', _('Pending approval')
        APPROVED = 'approved', _('Approved')

    email = models.EmailField(_('email_address'), unique=True)

    username = models.CharField(
        _('username'),
        max_length=150,
        blank=False,
        unique=True,
        null=True
    )
    nickname = models.CharField(_('nickname'), max_length=150, blank=True)

    is_staff = models.BooleanField(
        _('staff status'),
        default=False,
        help_text=_('Designates whether the user can log into this admin site.'),
    )
    is_active = models.BooleanField(
        _('active'),
        default=True,
        help_text=_(
            'Designates whether this user should be treated as active. '
            'Unselect this instead of deleting accounts.'
        ),
    )
    date_joined = models.DateTimeField(_('date joined'), auto_now_add=True)

    role = models.CharField(_('role'), max_length=16, choices=Role.choices, default=Role.STUDENT)
    grade = models.CharField(
        _('grade room'),
        max_length=60,
        blank=True,
        help_text=_('Grade room the student belongs to, e.g. "M.4/2".'),
    )
    class_code = models.CharField(_('class code'), max_length=32, blank=True)
    enrollment_status = models.CharField(
        _('enrollment status'),
        max_length=16,
        choices=EnrollmentStatus.choices,
        default=EnrollmentStatus.NONE,
    )
    managed_class_codes = models.JSONField(_('managed class codes'), default=list, blank=True)
    assigned_class_codes = models.JSONField(_('assigned class codes'), default=list, blank=True)

    objects = CustomUserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')

    def as_viewer(self) -> Viewer:
        """Visibility-relevant snapshot handed to the task projection."""
        return Viewer(
            id=self.pk,
            role=self.role,
            grade=self.grade,
            class_code=self.class_code or None,
            enrollment_status=self.enrollment_status,
            managed_class_codes=list(self.managed_class_codes or []),
            assigned_class_codes=list(self.assigned_class_codes or []),
        )

    def get_short_name(self):
        return self.nickname or self.username or self.email

    def __str__(self):
        return self.email
