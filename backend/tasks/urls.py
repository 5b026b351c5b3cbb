from django.urls import path
from .views import list_view
from .views import tasks_list_view
from .views import smart_priority_view
from .views import stats_view
from .views import status_update_view

urlpatterns=[
    # GET every visible task
    path('',list_view,name="task-list"),

    path('prioritized-list/',tasks_list_view,name="prioritized-list"),

    # POST: run the Smart Priority ranking
    path('smart-priority/',smart_priority_view,name="smart-priority"),

    path('stats/',stats_view,name="task-stats"),

    # PATCH {"status": ...}
    path('<str:task_id>/status/',status_update_view,name="task-status")

]
