# tasks/priority_engine/orchestrator.py

import datetime
import logging
from typing import List, Optional, Sequence

from .external_ranker import SmartPriorityClient, build_ranking_request
from .merge import apply_indexed_results, collect_overrides, index_results
from .overrides import InMemoryOverrideRepository, OverrideRepository
from .projection import Task

# Configure logging for pipeline auditing
logger = logging.getLogger(__name__)


class SmartPriorityOrchestrator:
    """
    Coordinates one AI ranking round for a user:

      active tasks -> batch request -> remote ranking -> merge -> persist overrides

    A failed call raises ``RankingError`` before anything is merged or
    persisted, so local defaults and previous overrides stay intact.
    """

    def __init__(
        self,
        client: Optional[SmartPriorityClient] = None,
        overrides: Optional[OverrideRepository] = None,
    ):
        self.client = client or SmartPriorityClient()
        self.overrides = overrides if overrides is not None else InMemoryOverrideRepository()

    def rank(
        self,
        user_id,
        tasks: Sequence[Task],
        now: Optional[datetime.datetime] = None,
    ) -> List[Task]:
        request_body = build_ranking_request(tasks, now)
        if not request_body["tasks"]:
            logger.info(f"Orchestrator: no active tasks for user {user_id}; skipping ranking")
            return list(tasks)

        requested_ids = {entry["task_id"] for entry in request_body["tasks"]}
        results = [r for r in self.client.rank(request_body) if r.task_id in requested_ids]

        by_id = index_results(results)
        merged = apply_indexed_results(tasks, by_id)
        persisted = collect_overrides(merged, by_id)
        for task_id, override in persisted:
            self.overrides.set(user_id, task_id, override)

        logger.info(
            f"Orchestrator: applied {len(persisted)} of {len(request_body['tasks'])} "
            f"ranked tasks for user {user_id}"
        )
        return merged
