import logging

from django.http import Http404
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .priority_engine import RankingError, RankingInProgressError
from .serializers import (
    ProductivityStatsSerializer,
    TaskSerializer,
    TaskStatusUpdateSerializer,
)

logger = logging.getLogger(__name__)


class TaskListView(APIView):
    """
    GET: Every task visible to the authenticated user, done ones included.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        tasks = services.load_tasks_for_user(request.user)
        return Response(TaskSerializer(tasks, many=True).data)

list_view = TaskListView.as_view()


class PrioritizedTaskListView(APIView):
    """
    Returns the active tasks ordered by priority_score descending.
    Submitted and pending-review tasks are left out.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        tasks = services.ranked_tasks(request.user)
        return Response(TaskSerializer(tasks, many=True).data)

tasks_list_view = PrioritizedTaskListView.as_view()


class SmartPriorityRankView(APIView):
    """
    POST: Ask the Smart Priority service to rank the active tasks.

    On failure the previous scores stay in place and the raw reason is
    returned so the UI can show it inline. A request that arrives while a
    ranking for the same user is still running is dropped with 409.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        try:
            tasks = services.rank_tasks_for_user(request.user)
        except RankingInProgressError as e:
            return Response(
                {"error": str(e), "error_code": e.error_code},
                status=status.HTTP_409_CONFLICT,
            )
        except RankingError as e:
            logger.warning(f"Smart Priority ranking failed for user {request.user.pk}: {e}")
            return Response(
                {"error": str(e), "error_code": e.error_code},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response({
            "updated_at": timezone.now(),
            "tasks": TaskSerializer(tasks, many=True).data,
        })

smart_priority_view = SmartPriorityRankView.as_view()


class TaskStatusUpdateView(APIView):
    """
    PATCH: Move a task to a new lifecycle status ({"status": ...}).
    """
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, task_id):
        serializer = TaskStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            progress = services.update_task_status(
                request.user, task_id, serializer.validated_data['status']
            )
        except services.TaskNotFound:
            raise Http404("Task not found.")

        return Response({
            "task_id": progress.task_id,
            "status": progress.status,
            "completed_at": progress.completed_at,
        })

status_update_view = TaskStatusUpdateView.as_view()


class ProductivityStatsView(APIView):
    """
    GET: total / active / done / backlog counts, on-time rate and streaks.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        stats = services.compute_user_stats(request.user)
        return Response(ProductivityStatsSerializer(stats.as_dict()).data)

stats_view = ProductivityStatsView.as_view()
