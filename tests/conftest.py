"""Shared fixtures for Task Master tests."""

import pytest

from taskmaster.tasks.models import parse_tasks


@pytest.fixture
def sample_tasks():
    """Small valid project: three tasks, task 3 with two subtasks."""
    return parse_tasks(
        [
            {
                "id": 1,
                "title": "Initialize Repo",
                "description": "Set up the repository",
                "status": "done",
                "priority": "high",
                "dependencies": [],
            },
            {
                "id": 2,
                "title": "Setup Database",
                "description": "Create the schema",
                "status": "pending",
                "priority": "medium",
                "dependencies": [1],
            },
            {
                "id": 3,
                "title": "Implement UI",
                "description": "Build the front end",
                "status": "in-progress",
                "priority": "high",
                "dependencies": [1],
                "subtasks": [
                    {
                        "id": 1,
                        "title": "Create Header Component",
                        "status": "done",
                        "dependencies": [],
                    },
                    {
                        "id": 2,
                        "title": "Create Footer Component",
                        "status": "pending",
                        "dependencies": ["3.1"],
                    },
                ],
            },
        ]
    )
