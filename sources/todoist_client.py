"""Client for the Todoist REST API."""
import logging
from typing import Any, Dict, List, Optional

import requests

from processor.models import Due, Project, Task

logger = logging.getLogger(__name__)


class TodoistAPIError(Exception):
    """Raised when a Todoist request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TodoistNotFoundError(TodoistAPIError):
    """Raised when the requested Todoist resource does not exist."""


class TodoistClient:
    """Read-only client for Todoist tasks and projects."""

    BASE_URL = "https://api.todoist.com/rest/v2"

    def __init__(self, api_token: str, timeout: int = 30, base_url: Optional[str] = None):
        """
        Initialize the Todoist client.

        Args:
            api_token: Personal API token used as bearer credential
            timeout: HTTP request timeout in seconds (default: 30)
            base_url: Override for the REST API root
        """
        self.timeout = timeout
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f"Bearer {api_token}",
            'Accept': 'application/json'
        })

    def get_tasks(self, project_id: str) -> List[Task]:
        """
        Fetch active tasks of a project.

        Args:
            project_id: Todoist project id

        Returns:
            List of Task objects in API order
        """
        logger.info(f"Fetching tasks for project {project_id}")
        items = self._get('/tasks', params={'project_id': project_id})
        tasks = [self._parse_task(item) for item in items]
        logger.info(f"Fetched {len(tasks)} tasks for project {project_id}")
        return tasks

    def get_project(self, project_id: str) -> Project:
        """
        Fetch project metadata.

        Args:
            project_id: Todoist project id

        Returns:
            Project object
        """
        item = self._get(f"/projects/{project_id}")
        return Project(id=str(item['id']), name=item.get('name') or '')

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Issue a GET request and decode the JSON body.

        Raises:
            TodoistNotFoundError: If Todoist answers 404
            TodoistAPIError: On any other HTTP or transport failure
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TodoistAPIError(f"Request to Todoist failed: {e}") from e

        if response.status_code == 404:
            raise TodoistNotFoundError(
                f"Todoist resource not found: {path}",
                status_code=404
            )

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"Todoist returned {response.status_code} for {url}")
            raise TodoistAPIError(
                f"Todoist request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code
            ) from e

        return response.json()

    def _parse_task(self, item: Dict[str, Any]) -> Task:
        """
        Convert a task payload into a Task.

        Args:
            item: Task JSON object from the API

        Returns:
            Task object, with due set to None when the task has no due date
        """
        due_data = item.get('due') or {}
        due = Due(date=due_data['date']) if due_data.get('date') else None

        return Task(
            id=str(item['id']),
            content=item.get('content') or '',
            description=item.get('description') or '',
            due=due
        )
