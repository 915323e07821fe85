"""Unit tests for adding and removing dependencies."""

import pytest

from taskmaster.dependencies.manager import (
    CircularDependencyError,
    DependencyError,
    SelfDependencyError,
    TaskNotFoundError,
    add_dependency,
    remove_dependency,
)
from taskmaster.tasks.ids import MalformedIdentifier, SubtaskRef, TaskRef
from taskmaster.tasks.models import parse_tasks


class TestAddDependency:
    """Tests for add_dependency."""

    def test_add_task_dependency(self):
        """Test a new edge is stored in sorted order."""
        tasks = parse_tasks([{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4, "dependencies": [3]}])

        assert add_dependency(tasks, 4, 1) is True
        assert tasks[3].dependencies == [TaskRef(1), TaskRef(3)]

    def test_add_subtask_dependency(self, sample_tasks):
        """Test tasks can depend on subtasks and subtask ids sort last."""
        assert add_dependency(sample_tasks, "2", "3.1") is True
        assert sample_tasks[1].dependencies == [TaskRef(1), SubtaskRef(3, 1)]

    def test_subtask_gets_dependency(self, sample_tasks):
        """Test subtasks can be the dependent side."""
        assert add_dependency(sample_tasks, "3.1", 2) is True
        assert sample_tasks[2].subtasks[0].dependencies == [TaskRef(2)]

    def test_existing_edge_returns_false(self, sample_tasks):
        """Test adding an existing edge is a no-op."""
        assert add_dependency(sample_tasks, 2, "1") is False
        assert sample_tasks[1].dependencies == [TaskRef(1)]

    def test_self_dependency_rejected(self, sample_tasks):
        """Test a node cannot depend on itself."""
        with pytest.raises(SelfDependencyError):
            add_dependency(sample_tasks, "3.2", "3.2")

    def test_missing_dependent(self, sample_tasks):
        """Test the dependent must exist."""
        with pytest.raises(TaskNotFoundError, match="Task 9 not found"):
            add_dependency(sample_tasks, 9, 1)

    def test_missing_target(self, sample_tasks):
        """Test the dependency target must exist."""
        with pytest.raises(TaskNotFoundError, match="3.5"):
            add_dependency(sample_tasks, 2, "3.5")
        assert sample_tasks[1].dependencies == [TaskRef(1)]

    def test_cycle_rejected(self, sample_tasks):
        """Test an edge closing a cycle is refused and nothing changes."""
        with pytest.raises(CircularDependencyError):
            add_dependency(sample_tasks, 1, 2)

        assert sample_tasks[0].dependencies == []

    def test_subtask_cycle_rejected(self, sample_tasks):
        """Test cycles between subtasks are refused."""
        with pytest.raises(CircularDependencyError):
            add_dependency(sample_tasks, "3.1", "3.2")

    def test_indirect_cycle_rejected(self):
        """Test longer cycles are found too."""
        tasks = parse_tasks(
            [{"id": 1, "dependencies": [2]}, {"id": 2, "dependencies": [3]}, {"id": 3}]
        )

        with pytest.raises(CircularDependencyError):
            add_dependency(tasks, 3, 1)

    def test_malformed_ids(self, sample_tasks):
        """Test malformed ids raise before anything is looked up."""
        with pytest.raises(MalformedIdentifier):
            add_dependency(sample_tasks, "1.2.3", 1)

    def test_errors_share_base_class(self):
        """Test all dependency errors derive from DependencyError."""
        for error in (TaskNotFoundError, SelfDependencyError, CircularDependencyError):
            assert issubclass(error, DependencyError)


class TestRemoveDependency:
    """Tests for remove_dependency."""

    def test_remove_existing(self, sample_tasks):
        """Test an existing edge is removed."""
        assert remove_dependency(sample_tasks, 2, 1) is True
        assert sample_tasks[1].dependencies == []

    def test_remove_subtask_edge(self, sample_tasks):
        """Test dotted edges are removed."""
        assert remove_dependency(sample_tasks, "3.2", "3.1") is True
        assert sample_tasks[2].subtasks[1].dependencies == []

    def test_remove_absent_edge(self, sample_tasks):
        """Test removing an absent edge reports no change."""
        assert remove_dependency(sample_tasks, 2, 3) is False
        assert sample_tasks[1].dependencies == [TaskRef(1)]

    def test_remove_unknown_target_still_works(self):
        """Test dangling edges can be removed even though the target is gone."""
        tasks = parse_tasks([{"id": 1, "dependencies": [99]}])

        assert remove_dependency(tasks, 1, 99) is True
        assert tasks[0].dependencies == []

    def test_missing_dependent(self, sample_tasks):
        """Test the dependent must exist."""
        with pytest.raises(TaskNotFoundError):
            remove_dependency(sample_tasks, "4.1", 1)
