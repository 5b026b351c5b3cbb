# tasks/serializers.py

from rest_framework import serializers

from .priority_engine import TaskStatus


class PriorityReasonField(serializers.Field):
    """The reason is a plain string locally and a list of strings from the AI."""

    def to_representation(self, value):
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return value


class TaskSerializer(serializers.Serializer):
    """Read-only representation of a projected ``Task``."""
    id = serializers.CharField()
    title = serializers.CharField()
    subject = serializers.CharField()
    deadline = serializers.DateTimeField()
    submission_type = serializers.CharField()
    channel = serializers.CharField()
    estimated_minutes = serializers.IntegerField()
    weight = serializers.FloatField()
    status = serializers.CharField()
    is_group = serializers.BooleanField()
    is_active = serializers.BooleanField()
    priority_score = serializers.IntegerField()
    priority_reason = PriorityReasonField()
    priority_level = serializers.CharField(allow_null=True)
    next_actions = serializers.ListField(child=serializers.CharField())
    assumptions = serializers.ListField(child=serializers.CharField())
    description = serializers.CharField(allow_blank=True)
    attachments = serializers.ListField(child=serializers.CharField())
    rubric = serializers.CharField(allow_null=True)
    class_code = serializers.CharField(allow_null=True)
    assigned_by = serializers.CharField(allow_null=True)
    returned_reason = serializers.CharField(allow_null=True)


class TaskStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TaskStatus.choices)


class ProductivityStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active_count = serializers.IntegerField()
    done_count = serializers.IntegerField()
    backlog_count = serializers.IntegerField()
    on_time_rate = serializers.IntegerField(min_value=0, max_value=100)
    current_streak = serializers.IntegerField(min_value=0)
    longest_streak = serializers.IntegerField(min_value=0)
