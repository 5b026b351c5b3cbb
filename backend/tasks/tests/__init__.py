# tasks/tests/__init__.py
"""
Task App Test Suite
===================

This package contains unit and integration tests for the tasks application.

Modules:
--------
- test_engine: Urgency, local scoring and productivity analytics
- test_projection: Assignment records -> Task, visibility, overrides
- test_orchestration: Ranking client contract, merge, orchestrator, controller
- test_api: Services and HTTP endpoints backed by the database, ranking guard
- test_repositories: ORM-backed override storage

Running Tests:
--------------
    # Run all task tests
    python manage.py test tasks

    # Run specific test module
    python manage.py test tasks.tests.test_engine
    python manage.py test tasks.tests.test_orchestration

    # Or through pytest-django from the repository root
    pytest backend/tasks
"""
